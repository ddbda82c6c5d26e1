"""
Clinic Appointment Service

A FastAPI-based backend for clinic appointment booking: users with roles,
doctor-clinic membership, children of patients, appointment scheduling with
eligibility checks, status approval and monthly reporting.
"""

__version__ = "1.0.0"
