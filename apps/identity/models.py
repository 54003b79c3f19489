from django.db import models
from django.contrib.auth.models import AbstractUser

from apps.core.ids import OBJECT_ID_LENGTH, generate_object_id


class User(AbstractUser):
    """
    Account that owns to-do records.

    Keyed by a 24-character hex id; only username and the salted password
    hash are used by the API.
    """
    id = models.CharField(
        primary_key=True,
        max_length=OBJECT_ID_LENGTH,
        default=generate_object_id,
        editable=False,
    )

    class Meta:
        ordering = ['username']

    def __str__(self):
        return self.username
