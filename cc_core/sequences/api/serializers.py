# cc_core/sequences/api/serializers.py
from rest_framework import serializers

from cc_core.clinic_settings.types import STREAMS


class NextNumberRequestSerializer(serializers.Serializer):
    stream = serializers.ChoiceField(choices=[(s, s) for s in STREAMS])
    date = serializers.DateTimeField(required=False, allow_null=True)


class AllocatedNumberSerializer(serializers.Serializer):
    number = serializers.CharField()
    key = serializers.CharField()
    current = serializers.IntegerField()
