import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('care', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='hospital',
            name='subscription_expires_at',
            field=models.DateTimeField(blank=True, null=True),
        ),
        migrations.AddField(
            model_name='patientvisit',
            name='ward',
            field=models.CharField(blank=True, max_length=64),
        ),
        migrations.AddField(
            model_name='patientvisit',
            name='bed_number',
            field=models.CharField(blank=True, max_length=32),
        ),
        migrations.AddField(
            model_name='patientvisit',
            name='admitted_at',
            field=models.DateTimeField(blank=True, null=True),
        ),
        migrations.AddField(
            model_name='patientvisit',
            name='discharged_at',
            field=models.DateTimeField(blank=True, null=True),
        ),
        migrations.CreateModel(
            name='Bed',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('ward', models.CharField(max_length=64)),
                ('bed_number', models.CharField(max_length=32)),
                ('bed_type', models.CharField(blank=True, max_length=32)),
                ('status', models.CharField(choices=[('available', 'Available'), ('occupied', 'Occupied'), ('cleaning', 'Cleaning'), ('maintenance', 'Maintenance')], db_index=True, default='available', max_length=16)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('hospital', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='beds', to='care.hospital')),
                ('patient', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bed', to='care.patientvisit')),
            ],
            options={
                'ordering': ['ward', 'bed_number'],
                'unique_together': {('hospital', 'ward', 'bed_number')},
            },
        ),
    ]
