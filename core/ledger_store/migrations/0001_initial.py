from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="LedgerSnapshot",
            fields=[
                (
                    "key",
                    models.CharField(
                        max_length=128,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("blob", models.TextField()),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "pollo_ledger_snapshots",
            },
        ),
    ]
