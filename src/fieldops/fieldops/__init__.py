"""fieldops package.

Feature modules (users, projects, attendance, payroll, expenses, ...) sit behind
a thin Flask controller layer, with service/repository layers underneath.
"""
