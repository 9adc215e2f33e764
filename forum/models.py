from django.db import models


class Post(models.Model):
    """
    论坛帖子

    字段设计说明：
    - category: 板块（工艺/设备/安全/职业发展/综合/其他）
    - tags / attachments: JSON 列表，按原顺序保存
    - author_id / author_name: 作者ID与发帖时的显示名（不建外键约束，允许孤儿数据）
    - likes: 点赞数冗余计数，必须与 Like 表中该帖的记录数一致
    - status: active / deleted（软删除）
    """

    CATEGORY_PROCESS = 'process'
    CATEGORY_EQUIPMENT = 'equipment'
    CATEGORY_SAFETY = 'safety'
    CATEGORY_CAREER = 'career'
    CATEGORY_GENERAL = 'general'
    CATEGORY_OTHER = 'other'

    CATEGORY_CHOICES = [
        (CATEGORY_PROCESS, '工艺技术'),
        (CATEGORY_EQUIPMENT, '设备管理'),
        (CATEGORY_SAFETY, '安全环保'),
        (CATEGORY_CAREER, '职业发展'),
        (CATEGORY_GENERAL, '综合讨论'),
        (CATEGORY_OTHER, '其他'),
    ]

    TYPE_HELP = 'help'
    TYPE_SHARE = 'share'
    TYPE_QUESTION = 'question'
    TYPE_EXPERIENCE = 'experience'

    TYPE_CHOICES = [
        (TYPE_HELP, '求助'),
        (TYPE_SHARE, '分享'),
        (TYPE_QUESTION, '提问'),
        (TYPE_EXPERIENCE, '经验'),
    ]

    STATUS_ACTIVE = 'active'
    STATUS_DELETED = 'deleted'

    STATUS_CHOICES = [
        (STATUS_ACTIVE, '正常'),
        (STATUS_DELETED, '已删除'),
    ]

    title = models.CharField(max_length=200)
    content = models.TextField()
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default=CATEGORY_GENERAL)
    tags = models.JSONField(default=list, blank=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_HELP)
    attachments = models.JSONField(default=list, blank=True)

    author_id = models.IntegerField(verbose_name='作者ID')
    author_name = models.CharField(max_length=50, verbose_name='作者显示名')

    views = models.PositiveIntegerField(default=0)
    likes = models.IntegerField(default=0)
    is_top = models.BooleanField(default=False, verbose_name='是否置顶')
    is_essence = models.BooleanField(default=False, verbose_name='是否精华')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'forum_posts'
        ordering = ['-is_top', '-created_at']
        indexes = [
            models.Index(fields=['author_id'], name='forum_post_author_idx'),
            models.Index(fields=['status', 'category'], name='forum_post_status_cat_idx'),
        ]

    def __str__(self) -> str:
        return f'{self.title} ({self.author_name})'


class Comment(models.Model):
    """
    帖子评论，最多两级：顶层评论（depth=0）与回复（depth=1）
    """

    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='comments')
    author_id = models.IntegerField(verbose_name='评论者ID')
    author_name = models.CharField(max_length=50)
    content = models.TextField()
    parent = models.ForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='children',
    )
    reply_to_user = models.CharField(max_length=50, blank=True, default='')
    depth = models.PositiveSmallIntegerField(default=0)
    is_accepted = models.BooleanField(default=False, verbose_name='是否被采纳')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'forum_comments'
        ordering = ['created_at', 'id']

    def __str__(self) -> str:
        return f'{self.post_id} - {self.author_name}'


class Like(models.Model):
    user_id = models.IntegerField()
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='like_set')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'forum_likes'
        constraints = [
            models.UniqueConstraint(fields=['user_id', 'post'], name='forum_like_user_post_uniq'),
        ]


class Collection(models.Model):
    user_id = models.IntegerField()
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name='collection_set')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'forum_collections'
        constraints = [
            models.UniqueConstraint(fields=['user_id', 'post'], name='forum_collect_user_post_uniq'),
        ]


class Message(models.Model):
    """站内私信（有向）"""

    sender_id = models.IntegerField()
    receiver_id = models.IntegerField()
    content = models.TextField()
    is_read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'forum_messages'
        indexes = [
            models.Index(fields=['receiver_id', 'is_read'], name='forum_msg_receiver_read_idx'),
            models.Index(fields=['sender_id', 'receiver_id'], name='forum_msg_pair_idx'),
        ]


class UserProfile(models.Model):
    """论坛用户资料：积分、擅长领域、个人简介（首次访问时创建）"""

    MAX_EXPERTISE_TAGS = 5
    MAX_BIO_LENGTH = 200

    user_id = models.IntegerField(primary_key=True)
    points = models.IntegerField(default=0)
    expertise_tags = models.JSONField(default=list, blank=True)
    bio = models.CharField(max_length=MAX_BIO_LENGTH, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'forum_user_profiles'

    def __str__(self) -> str:
        return f'{self.user_id} ({self.points})'


class PointsRecord(models.Model):
    """积分流水"""

    user_id = models.IntegerField()
    delta = models.IntegerField()
    reason = models.CharField(max_length=50)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'forum_points_records'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['user_id', 'reason'], name='forum_points_user_reason_idx'),
        ]
