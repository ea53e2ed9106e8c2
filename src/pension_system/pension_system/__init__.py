"""Pension Management System package.

This package is organized by feature modules (users, applications, complaints, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
