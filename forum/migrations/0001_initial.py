# Generated manually

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Post',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('content', models.TextField()),
                ('category', models.CharField(choices=[('process', '工艺技术'), ('equipment', '设备管理'), ('safety', '安全环保'), ('career', '职业发展'), ('general', '综合讨论'), ('other', '其他')], default='general', max_length=20)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('type', models.CharField(choices=[('help', '求助'), ('share', '分享'), ('question', '提问'), ('experience', '经验')], default='help', max_length=20)),
                ('attachments', models.JSONField(blank=True, default=list)),
                ('author_id', models.IntegerField(verbose_name='作者ID')),
                ('author_name', models.CharField(max_length=50, verbose_name='作者显示名')),
                ('views', models.PositiveIntegerField(default=0)),
                ('likes', models.IntegerField(default=0)),
                ('is_top', models.BooleanField(default=False, verbose_name='是否置顶')),
                ('is_essence', models.BooleanField(default=False, verbose_name='是否精华')),
                ('status', models.CharField(choices=[('active', '正常'), ('deleted', '已删除')], default='active', max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'forum_posts',
                'ordering': ['-is_top', '-created_at'],
                'indexes': [
                    models.Index(fields=['author_id'], name='forum_post_author_idx'),
                    models.Index(fields=['status', 'category'], name='forum_post_status_cat_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Comment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('author_id', models.IntegerField(verbose_name='评论者ID')),
                ('author_name', models.CharField(max_length=50)),
                ('content', models.TextField()),
                ('reply_to_user', models.CharField(blank=True, default='', max_length=50)),
                ('depth', models.PositiveSmallIntegerField(default=0)),
                ('is_accepted', models.BooleanField(default=False, verbose_name='是否被采纳')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='children', to='forum.comment')),
                ('post', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='comments', to='forum.post')),
            ],
            options={
                'db_table': 'forum_comments',
                'ordering': ['created_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Like',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.IntegerField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('post', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='like_set', to='forum.post')),
            ],
            options={
                'db_table': 'forum_likes',
                'constraints': [
                    models.UniqueConstraint(fields=('user_id', 'post'), name='forum_like_user_post_uniq'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Collection',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.IntegerField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('post', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='collection_set', to='forum.post')),
            ],
            options={
                'db_table': 'forum_collections',
                'constraints': [
                    models.UniqueConstraint(fields=('user_id', 'post'), name='forum_collect_user_post_uniq'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Message',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sender_id', models.IntegerField()),
                ('receiver_id', models.IntegerField()),
                ('content', models.TextField()),
                ('is_read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'forum_messages',
                'indexes': [
                    models.Index(fields=['receiver_id', 'is_read'], name='forum_msg_receiver_read_idx'),
                    models.Index(fields=['sender_id', 'receiver_id'], name='forum_msg_pair_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='UserProfile',
            fields=[
                ('user_id', models.IntegerField(primary_key=True, serialize=False)),
                ('points', models.IntegerField(default=0)),
                ('expertise_tags', models.JSONField(blank=True, default=list)),
                ('bio', models.CharField(blank=True, default='', max_length=200)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'forum_user_profiles',
            },
        ),
        migrations.CreateModel(
            name='PointsRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('user_id', models.IntegerField()),
                ('delta', models.IntegerField()),
                ('reason', models.CharField(max_length=50)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'forum_points_records',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user_id', 'reason'], name='forum_points_user_reason_idx'),
                ],
            },
        ),
    ]
