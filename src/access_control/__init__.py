"""Access control backend.

Organized by feature modules (profiles, attendance, access_logs, ...) with a
thin Flask controller layer over service/repository layers.
"""
