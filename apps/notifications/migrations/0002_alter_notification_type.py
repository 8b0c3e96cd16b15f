from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("notifications", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="notification",
            name="notification_type",
            field=models.CharField(
                choices=[
                    ("booking_created", "New booking"),
                    ("booking_approved", "Booking approved"),
                    ("booking_rejected", "Booking rejected"),
                    ("booking_expired", "Booking expired"),
                    ("booking_completed", "Booking completed"),
                    ("booking_hours_changed", "Booking hours changed"),
                    ("payment_recorded", "Payment recorded"),
                    ("extra_charge_added", "Extra charge added"),
                ],
                max_length=32,
            ),
        ),
    ]
