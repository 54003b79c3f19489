from django.db import models

from apps.core.ids import OBJECT_ID_LENGTH, generate_object_id


class TodoStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    IN_PROGRESS = 'in-progress', 'In Progress'
    COMPLETED = 'completed', 'Completed'


class Todo(models.Model):
    """
    A single to-do record.

    owner_id is the creating user's id, stored without a FK so the todos app
    stays independent of the identity app.
    """
    id = models.CharField(
        primary_key=True,
        max_length=OBJECT_ID_LENGTH,
        default=generate_object_id,
        editable=False,
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')
    status = models.CharField(
        max_length=20,
        choices=TodoStatus.choices,
        default=TodoStatus.PENDING,
    )
    owner_id = models.CharField(max_length=OBJECT_ID_LENGTH, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return f"{self.title} ({self.status})"
