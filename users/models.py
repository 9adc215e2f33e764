# -*- coding: utf-8 -*-


from django.db import models


class User(models.Model):
    STATUS_CHOICES = [
        ('normal', '正常'),
        ('banned', '封禁'),
    ]

    PERMISSION_USER = 0
    PERMISSION_ADMIN = 1

    username = models.CharField(max_length=50, unique=True, verbose_name='用户名')
    email = models.EmailField(max_length=100, unique=True, verbose_name='邮箱')
    password_hash = models.CharField(max_length=255)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='normal', verbose_name='用户状态')
    permission = models.IntegerField(default=PERMISSION_USER)
    last_login_time = models.DateTimeField(null=True, blank=True, verbose_name='最后登录时间')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'user'
        ordering = ['-created_at']

    def __str__(self) -> str:
        return self.username
