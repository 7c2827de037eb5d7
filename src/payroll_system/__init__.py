"""Payroll System package.

Organized by feature modules (users, shifts, attendance, advances, violations,
payroll) with a thin Flask controller layer over service/repository layers.
"""
