"""School Records package.

This package is organized by feature modules (users, roster, attendance, marks, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
