from __future__ import annotations

from rest_framework import serializers

from .models import AssemblyConstituency, District, Mandal, State


class StateSerializer(serializers.ModelSerializer):
    class Meta:
        model = State
        fields = ["id", "name", "code"]


class DistrictSerializer(serializers.ModelSerializer):
    class Meta:
        model = District
        fields = ["id", "name", "state"]


class MandalSerializer(serializers.ModelSerializer):
    class Meta:
        model = Mandal
        fields = ["id", "name", "district"]


class AssemblyConstituencySerializer(serializers.ModelSerializer):
    class Meta:
        model = AssemblyConstituency
        fields = ["id", "name", "district"]


class ParentFilterSerializer(serializers.Serializer):
    """Optional parent filters accepted by the listing endpoints."""

    state = serializers.IntegerField(required=False, min_value=1)
    district = serializers.IntegerField(required=False, min_value=1)
