"""
Notification subsystem.

Components:
- models.py: data structures (Notification, NotificationType, NavigationIntent)
- engine.py: capped, de-duplicated feed stored in the state tree
- monitor.py: polling deadline monitor + synthetic business events
"""
