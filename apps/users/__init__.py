"""Users app package.

Defines the custom user model with the marketplace roles (guest, host,
admin) and the permission classes the other apps share. Use
``apps.users.models.CustomUser`` as the AUTH_USER_MODEL throughout the
project.
"""
