"""tasklist — a small authenticated task-list service.

Users register and log in with email/password, receive a signed
stateless session token, and manage their own tasks with it.
"""

__version__ = "0.1.0"
