"""
Formulary Service - Drug Formulary Index and Clinical Workflow Engine

A key-value backed formulary catalog with secondary indexes, token search,
step-therapy compliance checks and prior authorization request tracking.
"""

__version__ = "0.1.0"
