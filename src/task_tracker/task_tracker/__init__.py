"""Task Tracker package.

Organized by feature modules (users, tasks, attendance, ...) with a thin Flask
controller layer over service and repository layers. Every state change is
broadcast to connected clients through the notifications module.
"""
