"""Face check-in package.

Feature modules (workers, attendance, subscriptions, notifications) each carry
a thin Flask controller plus service/repository layers wired in container.py.
"""
