# -*- coding: utf-8 -*-


from datetime import timedelta
from unittest import mock

from django.db import DatabaseError
from django.test import TestCase
from django.utils import timezone

from mindocean.errors import INVALID_OPERATION, NOT_FOUND, StoreFailure
from users.models import User

from . import comments, gamification, interactions, messaging, posts
from .models import Like, Message, Post, PointsRecord, UserProfile


def make_user(username, email=None):
    return User.objects.create(
        username=username,
        email=email or f'{username}@example.com',
        password_hash='x',
    )


class PostStoreTests(TestCase):
    def setUp(self):
        self.author = make_user('张工')

    def test_create_post_awards_points(self):
        post = posts.create_post('反应釜温度控制', '如何稳定控制反应釜温度？', 'process', self.author.id,
                                 tags=['反应釜', '温控'])

        self.assertEqual(post['author_name'], '张工')
        self.assertEqual(post['tags'], ['反应釜', '温控'])
        self.assertEqual(post['likes'], 0)
        self.assertEqual(post['status'], Post.STATUS_ACTIVE)
        self.assertEqual(gamification.get_profile(self.author.id)['points'], 10)

    def test_create_post_rejects_unknown_category(self):
        result = posts.create_post('标题', '内容', 'cooking', self.author.id)

        self.assertFalse(result)
        self.assertEqual(result.code, INVALID_OPERATION)
        self.assertFalse(Post.objects.exists())

    def test_search_requires_every_term(self):
        posts.create_post('精馏塔操作经验', '关于回流比的调整', 'process', self.author.id)
        posts.create_post('精馏塔检修', '停车检修流程', 'equipment', self.author.id)
        posts.create_post('安全培训', '回流管线泄漏处理', 'safety', self.author.id)

        titles = [p['title'] for p in posts.list_posts(search='精馏 回流')]
        self.assertEqual(titles, ['精馏塔操作经验'])

        titles = {p['title'] for p in posts.list_posts(search='回流')}
        self.assertEqual(titles, {'精馏塔操作经验', '安全培训'})

    def test_search_is_case_insensitive(self):
        posts.create_post('DCS 组态问题', '控制回路', 'process', self.author.id)

        self.assertEqual(len(posts.list_posts(search='dcs')), 1)

    def test_search_folds_non_ascii_case(self):
        russian = posts.create_post('ПРИВЕТ мир', 'Straße', 'general', self.author.id)
        french = posts.create_post('Émile', '内容', 'general', self.author.id)

        self.assertEqual([p['id'] for p in posts.list_posts(search='привет')], [russian['id']])
        self.assertEqual([p['id'] for p in posts.list_posts(search='émile')], [french['id']])
        self.assertEqual([p['id'] for p in posts.list_posts(search='STRASSE мир')], [russian['id']])

    def test_list_filters_category_and_hides_deleted(self):
        kept = posts.create_post('设备润滑', '润滑周期', 'equipment', self.author.id)
        removed = posts.create_post('设备防腐', '防腐涂层', 'equipment', self.author.id)
        posts.create_post('职业规划', '转岗建议', 'career', self.author.id)
        posts.delete_post(removed['id'])

        listed = posts.list_posts(category='equipment')
        self.assertEqual([p['id'] for p in listed], [kept['id']])
        self.assertEqual(len(posts.list_posts(category='all')), 2)
        self.assertEqual(posts.get_post(removed['id'])['status'], Post.STATUS_DELETED)

    def test_top_posts_come_first(self):
        first = posts.create_post('第一篇', '内容', 'general', self.author.id)
        posts.create_post('第二篇', '内容', 'general', self.author.id)
        posts.set_top(first['id'], True)

        listed = posts.list_posts()
        self.assertEqual(listed[0]['id'], first['id'])

    def test_hot_sort_uses_views_and_comments(self):
        quiet = posts.create_post('冷门帖', '内容', 'general', self.author.id)
        busy = posts.create_post('热门帖', '内容', 'general', self.author.id)
        Post.objects.filter(id=quiet['id']).update(views=3)
        Post.objects.filter(id=busy['id']).update(views=2)
        comments.create_comment(busy['id'], self.author.id, '顶')
        comments.create_comment(busy['id'], self.author.id, '再顶')

        listed = posts.list_posts(sort='hot')
        self.assertEqual([p['id'] for p in listed], [busy['id'], quiet['id']])
        self.assertEqual(listed[0]['comment_count'], 2)

    def test_essence_sort_only_returns_essence(self):
        normal = posts.create_post('普通帖', '内容', 'general', self.author.id)
        essence = posts.create_post('精华帖', '内容', 'general', self.author.id)
        posts.set_essence(essence['id'], True)

        listed = posts.list_posts(sort='essence')
        self.assertEqual([p['id'] for p in listed], [essence['id']])
        self.assertNotIn(normal['id'], [p['id'] for p in listed])

    def test_invalid_sort(self):
        result = posts.list_posts(sort='random')
        self.assertEqual(result.code, INVALID_OPERATION)

    def test_pagination_coerces_bad_values(self):
        for index in range(3):
            posts.create_post(f'帖子{index}', '内容', 'general', self.author.id)

        self.assertEqual(len(posts.list_posts(limit=2, offset=0)), 2)
        self.assertEqual(len(posts.list_posts(limit='abc', offset=-5)), 3)

    def test_update_post_only_touches_editable_fields(self):
        post = posts.create_post('旧标题', '旧内容', 'general', self.author.id)

        updated = posts.update_post(post['id'], {'title': '新标题', 'likes': 99, 'tags': ['换热器']})
        self.assertEqual(updated['title'], '新标题')
        self.assertEqual(updated['tags'], ['换热器'])
        self.assertEqual(updated['likes'], 0)

    def test_update_missing_post(self):
        self.assertEqual(posts.update_post(9999, {'title': 'x'}).code, NOT_FOUND)

    def test_increment_views(self):
        post = posts.create_post('浏览量', '内容', 'general', self.author.id)
        posts.increment_views(post['id'])
        posts.increment_views(post['id'])

        self.assertEqual(posts.get_post(post['id'])['views'], 2)

    def test_posts_by_ids_skips_deleted(self):
        first = posts.create_post('第一篇', '内容', 'general', self.author.id)
        second = posts.create_post('第二篇', '内容', 'general', self.author.id)
        removed = posts.create_post('第三篇', '内容', 'general', self.author.id)
        posts.delete_post(removed['id'])

        listed = posts.get_posts_by_ids([first['id'], second['id'], removed['id'], 9999])
        self.assertEqual({p['id'] for p in listed}, {first['id'], second['id']})
        self.assertEqual(posts.get_posts_by_ids([]), [])


class CommentTreeTests(TestCase):
    def setUp(self):
        self.alice = make_user('alice')
        self.bob = make_user('bob')
        self.carol = make_user('carol')
        self.post = posts.create_post('换热器结垢', '怎么处理？', 'equipment', self.alice.id)

    def test_reply_to_reply_collapses_to_root(self):
        root = comments.create_comment(self.post['id'], self.bob.id, '定期清洗')
        reply = comments.create_comment(self.post['id'], self.carol.id, '用什么药剂？', root['id'])
        nested = comments.create_comment(self.post['id'], self.alice.id, '酸洗即可', reply['id'])

        self.assertEqual(reply['parent_id'], root['id'])
        self.assertEqual(reply['depth'], 1)
        self.assertEqual(reply['reply_to_user'], 'bob')
        self.assertEqual(nested['parent_id'], root['id'])
        self.assertEqual(nested['depth'], 1)
        self.assertEqual(nested['reply_to_user'], 'carol')

        tree = comments.get_comments_for_post(self.post['id'])
        self.assertEqual(len(tree), 1)
        self.assertEqual([r['id'] for r in tree[0]['replies']], [reply['id'], nested['id']])

    def test_root_comment_has_no_reply_target(self):
        root = comments.create_comment(self.post['id'], self.bob.id, '顶')

        self.assertIsNone(root['parent_id'])
        self.assertEqual(root['depth'], 0)
        self.assertIsNone(root['reply_to_user'])

    def test_comment_on_missing_post(self):
        self.assertEqual(comments.create_comment(9999, self.bob.id, '顶').code, NOT_FOUND)

    def test_parent_on_other_post(self):
        other = posts.create_post('其他帖子', '内容', 'general', self.bob.id)
        foreign = comments.create_comment(other['id'], self.bob.id, '评论')

        result = comments.create_comment(self.post['id'], self.carol.id, '回复', foreign['id'])
        self.assertEqual(result.code, INVALID_OPERATION)

    def test_comment_awards_points(self):
        comments.create_comment(self.post['id'], self.bob.id, '顶')
        self.assertEqual(gamification.get_profile(self.bob.id)['points'], 3)

    def test_accept_comment_is_idempotent(self):
        root = comments.create_comment(self.post['id'], self.bob.id, '定期清洗')

        self.assertTrue(comments.accept_comment(root['id'])['is_accepted'])
        comments.accept_comment(root['id'])
        self.assertEqual(gamification.get_profile(self.bob.id)['points'], 3 + 20)


class LikeCollectTests(TestCase):
    def setUp(self):
        self.author = make_user('author')
        self.reader = make_user('reader')
        self.post = posts.create_post('泵的气蚀', '原因分析', 'equipment', self.author.id)

    def test_toggle_like_twice_restores_state(self):
        first = interactions.toggle_like(self.post['id'], self.reader.id)
        self.assertEqual(first, {'liked': True, 'likes': 1})
        self.assertEqual(gamification.get_profile(self.author.id)['points'], 15)

        second = interactions.toggle_like(self.post['id'], self.reader.id)
        self.assertEqual(second, {'liked': False, 'likes': 0})
        self.assertEqual(gamification.get_profile(self.author.id)['points'], 10)
        self.assertFalse(Like.objects.exists())

    def test_like_count_matches_rows(self):
        other = make_user('other')
        interactions.toggle_like(self.post['id'], self.reader.id)
        interactions.toggle_like(self.post['id'], other.id)

        likes = Post.objects.get(id=self.post['id']).likes
        self.assertEqual(likes, Like.objects.filter(post_id=self.post['id']).count())

    def test_self_like_does_not_change_points(self):
        interactions.toggle_like(self.post['id'], self.author.id)
        self.assertEqual(gamification.get_profile(self.author.id)['points'], 10)

    def test_like_missing_post(self):
        self.assertEqual(interactions.toggle_like(9999, self.reader.id).code, NOT_FOUND)

    def test_toggle_collect(self):
        self.assertEqual(interactions.toggle_collect(self.post['id'], self.reader.id), {'collected': True})
        self.assertTrue(interactions.is_collected(self.post['id'], self.reader.id))
        self.assertEqual(interactions.get_user_collected_posts(self.reader.id), [self.post['id']])
        self.assertEqual(interactions.toggle_collect(self.post['id'], self.reader.id), {'collected': False})

    def test_failed_points_update_rolls_back_like(self):
        with mock.patch.object(PointsRecord.objects, 'create', side_effect=DatabaseError('写入失败')):
            with self.assertRaises(StoreFailure):
                interactions.toggle_like(self.post['id'], self.reader.id)

        self.assertEqual(Post.objects.get(id=self.post['id']).likes, 0)
        self.assertFalse(Like.objects.exists())
        self.assertEqual(gamification.get_profile(self.author.id)['points'], 10)

    def test_user_liked_posts(self):
        other = posts.create_post('离心泵选型', '内容', 'equipment', self.author.id)
        interactions.toggle_like(self.post['id'], self.reader.id)
        interactions.toggle_like(other['id'], self.reader.id)

        self.assertEqual(set(interactions.get_user_liked_posts(self.reader.id)), {self.post['id'], other['id']})
        self.assertEqual(interactions.get_user_like_count(self.reader.id), 2)
        self.assertEqual(interactions.get_user_liked_posts(self.author.id), [])

    def test_post_status(self):
        interactions.toggle_like(self.post['id'], self.reader.id)

        status = interactions.get_post_status(self.post['id'], self.reader.id)
        self.assertEqual(status, {'liked': True, 'collected': False, 'likes': 1})


class MessagingTests(TestCase):
    def setUp(self):
        self.alice = make_user('alice')
        self.bob = make_user('bob')
        self.carol = make_user('carol')

    def test_unread_count_and_mark_read(self):
        messaging.send_message(self.bob.id, self.alice.id, '你好')
        messaging.send_message(self.bob.id, self.alice.id, '在吗')
        messaging.send_message(self.alice.id, self.bob.id, '在')

        self.assertEqual(messaging.get_unread_count(self.alice.id), 2)
        self.assertEqual(messaging.mark_conversation_read(self.alice.id, self.bob.id), 2)
        self.assertEqual(messaging.get_unread_count(self.alice.id), 0)
        # 单向标记，不影响 bob 收到的消息
        self.assertEqual(messaging.get_unread_count(self.bob.id), 1)

    def test_send_to_self(self):
        self.assertEqual(messaging.send_message(self.alice.id, self.alice.id, 'hi').code, INVALID_OPERATION)

    def test_send_to_missing_user(self):
        self.assertEqual(messaging.send_message(self.alice.id, 9999, 'hi').code, NOT_FOUND)

    def test_conversation_is_chronological(self):
        first = messaging.send_message(self.alice.id, self.bob.id, '第一条')
        second = messaging.send_message(self.bob.id, self.alice.id, '第二条')
        messaging.send_message(self.carol.id, self.alice.id, '无关')

        conversation = messaging.get_conversation(self.alice.id, self.bob.id)
        self.assertEqual([m['id'] for m in conversation], [first['id'], second['id']])
        self.assertEqual(conversation[0]['sender_name'], 'alice')

    def test_contacts_show_latest_message(self):
        now = timezone.now()
        old = messaging.send_message(self.bob.id, self.alice.id, '旧消息')
        new = messaging.send_message(self.alice.id, self.bob.id, '新消息')
        other = messaging.send_message(self.carol.id, self.alice.id, '你好')
        Message.objects.filter(id=old['id']).update(created_at=now - timedelta(hours=3))
        Message.objects.filter(id=new['id']).update(created_at=now - timedelta(hours=2))
        Message.objects.filter(id=other['id']).update(created_at=now - timedelta(hours=1))

        contacts = messaging.get_contacts(self.alice.id)
        self.assertEqual([c['other_id'] for c in contacts], [self.carol.id, self.bob.id])
        self.assertEqual(contacts[1]['content'], '新消息')
        self.assertEqual(contacts[0]['unread_count'], 1)
        self.assertEqual(contacts[1]['unread_count'], 1)

    def test_inbox_and_single_message(self):
        older = messaging.send_message(self.bob.id, self.alice.id, '第一条')
        newer = messaging.send_message(self.carol.id, self.alice.id, '第二条')
        messaging.send_message(self.alice.id, self.bob.id, '发出的消息')
        Message.objects.filter(id=older['id']).update(created_at=timezone.now() - timedelta(minutes=5))

        inbox = messaging.get_user_messages(self.alice.id)
        self.assertEqual([m['id'] for m in inbox], [newer['id'], older['id']])

        message = messaging.get_message(older['id'])
        self.assertEqual(message['content'], '第一条')
        self.assertEqual(message['sender_name'], 'bob')
        self.assertEqual(message['receiver_name'], 'alice')
        self.assertIsNone(messaging.get_message(9999))

    def test_mark_message_read_requires_receiver(self):
        message = messaging.send_message(self.bob.id, self.alice.id, '你好')

        self.assertFalse(messaging.mark_message_read(message['id'], self.bob.id))
        self.assertTrue(messaging.mark_message_read(message['id'], self.alice.id))


class GamificationTests(TestCase):
    def test_level_is_monotonic(self):
        previous = 0
        for points in range(-100, 25000, 37):
            level = gamification.get_level(points)['level']
            self.assertGreaterEqual(level, previous)
            previous = level

    def test_level_boundaries(self):
        self.assertEqual(gamification.get_level(0)['title'], '实习工程师')
        self.assertEqual(gamification.get_level(-20)['level'], 1)
        self.assertEqual(gamification.get_level(49)['level'], 1)
        self.assertEqual(gamification.get_level(50)['level'], 2)
        top = gamification.get_level(999999)
        self.assertEqual(top['level'], 10)
        self.assertIsNone(top['next_level_min_points'])

    def test_daily_login_once_per_day(self):
        user = make_user('daily')

        self.assertEqual(gamification.record_daily_login(user.id), 2)
        self.assertIsNone(gamification.record_daily_login(user.id))

        PointsRecord.objects.filter(user_id=user.id).update(created_at=timezone.now() - timedelta(days=2))
        self.assertEqual(gamification.record_daily_login(user.id), 4)

    def test_expertise_tags_truncated(self):
        profile = gamification.update_expertise_tags(1, ['工艺优化', ' 设备维护 ', '', '安全管理', '催化剂', '反应工程', '职业规划'])
        self.assertEqual(profile['expertise_tags'], ['工艺优化', '设备维护', '安全管理', '催化剂', '反应工程'])

    def test_expertise_tags_must_be_strings(self):
        self.assertEqual(gamification.update_expertise_tags(1, '工艺优化').code, INVALID_OPERATION)
        self.assertEqual(gamification.update_expertise_tags(1, ['工艺优化', 3]).code, INVALID_OPERATION)

    def test_bio_truncated(self):
        profile = gamification.update_bio(1, '长' * 300)
        self.assertEqual(len(profile['bio']), UserProfile.MAX_BIO_LENGTH)

    def test_level_config_and_expertise_options(self):
        config = gamification.get_level_config()
        self.assertEqual(len(config), 10)
        self.assertEqual(config[0]['title'], '实习工程师')
        minimums = [tier['min_points'] for tier in config]
        self.assertEqual(minimums, sorted(minimums))

        # 返回副本，修改不影响下次调用
        config[0]['title'] = '改动'
        self.assertEqual(gamification.get_level_config()[0]['title'], '实习工程师')

        options = gamification.get_expertise_options()
        self.assertIn('工艺优化', options)
        options.append('其他')
        self.assertNotIn('其他', gamification.get_expertise_options())

    def test_user_stats(self):
        author = make_user('stats')
        reader = make_user('reader')
        post = posts.create_post('统计', '内容', 'general', author.id)
        interactions.toggle_like(post['id'], reader.id)

        stats = gamification.get_user_stats(author.id)
        self.assertEqual(stats['post_count'], 1)
        self.assertEqual(stats['received_likes'], 1)
        self.assertEqual(stats['profile']['points'], 15)
        self.assertEqual(stats['profile']['level']['title'], '实习工程师')
