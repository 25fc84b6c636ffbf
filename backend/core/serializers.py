from rest_framework import serializers
from django.contrib.auth import get_user_model

from .models import TracerUpdate

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'role', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=6)

    class Meta:
        model = User
        fields = ['email', 'name', 'password', 'role']
        extra_kwargs = {
            # duplicate emails are answered by the view with its own message
            'email': {'validators': []},
        }

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)


class UserUpdateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = User
        fields = ['email', 'name', 'role', 'password']
        extra_kwargs = {
            'email': {'validators': [], 'required': False},
            'name': {'required': False},
            'role': {'required': False},
        }

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for field, value in validated_data.items():
            # empty values leave the current one in place
            if value:
                setattr(instance, field, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class TracerUpdateSerializer(serializers.ModelSerializer):
    sourceTable = serializers.CharField(source='source_table')
    sourceKey = serializers.CharField(source='source_key')
    fieldName = serializers.CharField(source='field_name')
    oldValue = serializers.CharField(source='old_value', allow_null=True)
    newValue = serializers.CharField(source='new_value', allow_null=True)
    actionType = serializers.CharField(source='action_type')
    changedAt = serializers.DateTimeField(source='changed_at')
    changedBy = serializers.CharField(source='changed_by', allow_null=True)

    class Meta:
        model = TracerUpdate
        fields = [
            'id', 'sourceTable', 'sourceKey', 'fieldName', 'oldValue', 'newValue',
            'actionType', 'changedAt', 'changedBy',
        ]
