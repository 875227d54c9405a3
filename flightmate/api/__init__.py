# api/__init__.py
"""
API Endpoints Package

- auth: register / login
- users: profile
- chat: message generation and session history
- health: service status
"""
