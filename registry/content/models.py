from django.db import models


class WebContent(models.Model):
    """Editable site copy for one tenant ('main' for the platform site)"""
    admin_username = models.CharField(max_length=150, unique=True, db_index=True)
    content = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'web_contents'

    def __str__(self):
        return f"Web content: {self.admin_username}"


class Navigation(models.Model):
    NAVBAR = 'navbar'
    FOOTER = 'footer'
    TYPE_CHOICES = [
        (NAVBAR, 'Navbar'),
        (FOOTER, 'Footer'),
    ]

    admin_username = models.CharField(max_length=150, db_index=True)
    nav_type = models.CharField(max_length=10, choices=TYPE_CHOICES)
    content = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'navigations'
        unique_together = [['admin_username', 'nav_type']]

    def __str__(self):
        return f"{self.nav_type} ({self.admin_username})"
