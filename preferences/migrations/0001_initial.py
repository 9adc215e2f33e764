# Generated manually

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='GlobalSetting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.IntegerField(verbose_name='用户ID')),
                ('category', models.CharField(max_length=50)),
                ('config_data', models.JSONField(default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'global_settings',
                'constraints': [
                    models.UniqueConstraint(fields=('user_id', 'category'), name='global_setting_user_cat_uniq'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AppSetting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.IntegerField(verbose_name='用户ID')),
                ('app_name', models.CharField(max_length=50)),
                ('category', models.CharField(max_length=50)),
                ('config_data', models.JSONField(default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'app_settings',
                'constraints': [
                    models.UniqueConstraint(fields=('user_id', 'app_name', 'category'), name='app_setting_user_app_cat_uniq'),
                ],
            },
        ),
        migrations.CreateModel(
            name='CalendarSetting',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.IntegerField(verbose_name='用户ID')),
                ('setting_type', models.CharField(max_length=20)),
                ('config_data', models.JSONField(default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'calendar_settings',
                'constraints': [
                    models.UniqueConstraint(fields=('user_id', 'setting_type'), name='calendar_setting_user_type_uniq'),
                ],
            },
        ),
    ]
