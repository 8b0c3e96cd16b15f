"""Serializers for the rate settings endpoint."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import RateSettings


class RateSettingsSerializer(serializers.ModelSerializer):
    """Read representation of the rate settings."""

    updated_by = serializers.ReadOnlyField(source="updated_by.username", default=None)
    night_window = serializers.SerializerMethodField()

    class Meta:
        model = RateSettings
        fields = [
            "day_rate",
            "night_rate",
            "night_start_hour",
            "night_end_hour",
            "night_window",
            "updated_by",
            "updated_at",
        ]
        read_only_fields = fields

    def get_night_window(self, obj: RateSettings) -> str:
        return f"{obj.night_start_hour:02d}:00-{obj.night_end_hour:02d}:00"


class RateSettingsUpdateSerializer(serializers.Serializer):
    """
    Partial update payload.

    Field level range checks live in the settings store so that the same
    rules apply to admin and API callers; this serializer only rejects
    unknown keys and empty payloads early.
    """

    day_rate = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    night_rate = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    night_start_hour = serializers.IntegerField(required=False)
    night_end_hour = serializers.IntegerField(required=False)

    def validate(self, attrs):  # type: ignore
        unknown = set(self.initial_data) - set(self.fields)
        if unknown:
            raise serializers.ValidationError(
                {name: ["Unknown setting."] for name in sorted(unknown)}
            )
        if not attrs:
            raise serializers.ValidationError("No settings supplied.")
        return attrs
