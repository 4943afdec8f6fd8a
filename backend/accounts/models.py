from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    class Role(models.TextChoices):
        CUSTOMER = "customer", "Customer"
        SHOPKEEPER = "shopkeeper", "Shopkeeper"
        ADMIN = "admin", "Admin"

    role = models.CharField(max_length=32, choices=Role.choices, default=Role.CUSTOMER)

    def is_shopkeeper(self) -> bool:
        return self.role == self.Role.SHOPKEEPER

    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN
