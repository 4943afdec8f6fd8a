from rest_framework import serializers

from accounts.app_mode import AppMode
from accounts.models import User


class AppModeSerializer(serializers.Serializer):
    mode = serializers.ChoiceField(choices=AppMode.choices)


class CurrentUserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'first_name', 'last_name', 'email', 'role']
        read_only_fields = fields
