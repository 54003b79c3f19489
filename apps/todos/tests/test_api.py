"""
Integration tests for todos API endpoints.
Tests authentication, the id guard, validation and end-to-end flows.
"""
import json
from datetime import datetime, timedelta, timezone
from unittest import mock

import jwt
from django.conf import settings
from django.db import DatabaseError
from django.test import TestCase, Client

from apps.core.ids import InvalidObjectId, generate_object_id
from apps.identity.jwt_auth import JWT_ALGORITHM, create_access_token
from apps.identity.models import User
from apps.todos import services
from apps.todos.models import Todo, TodoStatus


class TodoAPITestCase(TestCase):
    """Shared fixtures: one user with a valid token and one stored todo."""

    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(username='squbix1', password='squbix1')
        self.token = create_access_token(self.user.id)
        self.todo = Todo.objects.create(
            title='Test Todo',
            description='This is a test todo',
            status=TodoStatus.PENDING,
            owner_id=self.user.id,
        )

    def auth_headers(self, token=None):
        return {'HTTP_AUTHORIZATION': f'Bearer {token or self.token}'}

    def send(self, method, url, payload=None, **headers):
        kwargs = dict(headers)
        if payload is not None:
            kwargs['data'] = json.dumps(payload)
            kwargs['content_type'] = 'application/json'
        return getattr(self.client, method)(url, **kwargs)


class AuthorizationTest(TodoAPITestCase):
    """Every todo route sits behind the bearer-token check."""

    def routes(self):
        detail = f'/api/todos/{self.todo.id}'
        return [
            ('get', '/api/todos', None),
            ('post', '/api/todos', {'title': 'x'}),
            ('get', detail, None),
            ('put', detail, {'title': 'x'}),
            ('delete', detail, None),
        ]

    def test_missing_header_is_unauthorized(self):
        for method, url, payload in self.routes():
            response = self.send(method, url, payload)
            self.assertEqual(response.status_code, 401, f"{method} {url}")
            self.assertEqual(response.json(), {'message': 'Unauthorized User'})

    def test_missing_header_wins_over_bad_body(self):
        response = self.client.post('/api/todos', data='{oops', content_type='application/json')
        self.assertEqual(response.status_code, 401)

    def test_invalid_token(self):
        for method, url, payload in self.routes():
            response = self.send(method, url, payload, **self.auth_headers('not-a-token'))
            self.assertEqual(response.status_code, 400, f"{method} {url}")
            self.assertEqual(response.json(), {'message': 'Invalid Token'})

    def test_expired_token(self):
        expired = jwt.encode(
            {'user': {'id': self.user.id}, 'exp': datetime.now(timezone.utc) - timedelta(minutes=1)},
            settings.JWT_SECRET,
            algorithm=JWT_ALGORITHM,
        )
        response = self.client.get('/api/todos', **self.auth_headers(expired))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'message': 'Invalid Token'})

    def test_scheme_word_is_not_checked(self):
        response = self.client.get('/api/todos', HTTP_AUTHORIZATION=f'Token {self.token}')
        self.assertEqual(response.status_code, 200)


class ResourceGuardTest(TodoAPITestCase):
    def test_malformed_id_is_rejected_for_every_method(self):
        for method, payload in (('get', None), ('put', {'title': 'x'}), ('delete', None)):
            response = self.send(method, '/api/todos/invalid-id', payload, **self.auth_headers())
            self.assertEqual(response.status_code, 400, method)
            self.assertEqual(response.json(), {'message': 'Invalid Id'})

    def test_malformed_id_never_reaches_the_store(self):
        with mock.patch('apps.todos.services.get_todo') as get_todo:
            response = self.client.get('/api/todos/1234', **self.auth_headers())
        self.assertEqual(response.status_code, 400)
        get_todo.assert_not_called()

    def test_malformed_id_on_put_is_checked_before_the_body(self):
        bodies = (
            {},
            {'data': '', 'content_type': 'application/json'},
            {'data': json.dumps({'title': 5}), 'content_type': 'application/json'},
            {'data': '{oops', 'content_type': 'application/json'},
        )
        for body in bodies:
            response = self.client.put('/api/todos/invalid-id', **body, **self.auth_headers())
            self.assertEqual(response.status_code, 400, body)
            self.assertEqual(response.json(), {'message': 'Invalid Id'})

    def test_unknown_id_is_not_found(self):
        missing = generate_object_id()
        for method, payload in (('get', None), ('put', {'title': 'x'}), ('delete', None)):
            response = self.send(method, f'/api/todos/{missing}', payload, **self.auth_headers())
            self.assertEqual(response.status_code, 404, method)
            self.assertEqual(response.json(), {'message': 'Cannot find todo'})

    def test_store_failure_during_lookup(self):
        with mock.patch('apps.todos.services.get_todo', side_effect=DatabaseError('connection lost')):
            response = self.client.get(f'/api/todos/{self.todo.id}', **self.auth_headers())
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'message': 'connection lost'})


class CreateTodoTest(TodoAPITestCase):
    def test_create_with_title_only_uses_defaults(self):
        response = self.send('post', '/api/todos', {'title': 'Buy milk'}, **self.auth_headers())
        self.assertEqual(response.status_code, 201)

        data = response.json()
        self.assertEqual(data['title'], 'Buy milk')
        self.assertEqual(data['description'], '')
        self.assertEqual(data['status'], 'pending')
        self.assertEqual(data['owner_id'], self.user.id)
        self.assertTrue(Todo.objects.filter(id=data['id']).exists())

    def test_create_with_all_fields(self):
        payload = {'title': 'Write report', 'description': 'Q3 numbers', 'status': 'in-progress'}
        response = self.send('post', '/api/todos', payload, **self.auth_headers())
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['status'], 'in-progress')
        self.assertEqual(response.json()['description'], 'Q3 numbers')

    def test_create_without_title(self):
        for payload in ({}, {'title': ''}, {'description': 'no title'}):
            response = self.send('post', '/api/todos', payload, **self.auth_headers())
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.json(), {'message': 'Title is required'})

    def test_create_with_unknown_status(self):
        response = self.send('post', '/api/todos', {'title': 'x', 'status': 'someday'}, **self.auth_headers())
        self.assertEqual(response.status_code, 400)
        self.assertIn('status', response.json()['message'])
        self.assertEqual(Todo.objects.count(), 1)

    def test_create_store_failure(self):
        with mock.patch('apps.todos.services.create_todo', side_effect=DatabaseError('write failed')):
            response = self.send('post', '/api/todos', {'title': 'x'}, **self.auth_headers())
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'message': 'write failed'})


class ListTodosTest(TodoAPITestCase):
    def test_list_returns_all_todos(self):
        other = User.objects.create_user(username='other', password='pw')
        Todo.objects.create(title='Not mine', owner_id=other.id)

        response = self.client.get('/api/todos', **self.auth_headers())
        self.assertEqual(response.status_code, 200)

        titles = [item['title'] for item in response.json()]
        self.assertCountEqual(titles, ['Test Todo', 'Not mine'])

    def test_list_store_failure(self):
        with mock.patch('apps.todos.services.list_todos', side_effect=DatabaseError('boom')):
            response = self.client.get('/api/todos', **self.auth_headers())
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'message': 'Server Error'})


class GetTodoTest(TodoAPITestCase):
    def test_get_by_id(self):
        response = self.client.get(f'/api/todos/{self.todo.id}', **self.auth_headers())
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['id'], self.todo.id)
        self.assertEqual(response.json()['title'], 'Test Todo')

    def test_get_by_uppercase_id(self):
        response = self.client.get(f'/api/todos/{self.todo.id.upper()}', **self.auth_headers())
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['id'], self.todo.id)


class UpdateTodoTest(TodoAPITestCase):
    def url(self):
        return f'/api/todos/{self.todo.id}'

    def test_update_all_fields(self):
        payload = {
            'title': 'Updated Todo',
            'description': 'This is an updated test todo',
            'status': 'completed',
        }
        response = self.send('put', self.url(), payload, **self.auth_headers())
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertEqual(data['title'], 'Updated Todo')
        self.assertEqual(data['description'], 'This is an updated test todo')
        self.assertEqual(data['status'], 'completed')

        self.todo.refresh_from_db()
        self.assertEqual(self.todo.status, TodoStatus.COMPLETED)

    def test_partial_update_keeps_other_fields(self):
        response = self.send('put', self.url(), {'status': 'in-progress'}, **self.auth_headers())
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertEqual(data['status'], 'in-progress')
        self.assertEqual(data['title'], 'Test Todo')
        self.assertEqual(data['description'], 'This is a test todo')

    def test_null_fields_are_ignored(self):
        response = self.send('put', self.url(), {'title': None, 'description': 'new'}, **self.auth_headers())
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['title'], 'Test Todo')
        self.assertEqual(response.json()['description'], 'new')

    def test_update_without_body_leaves_record_unchanged(self):
        response = self.client.put(self.url(), **self.auth_headers())
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertEqual(data['title'], 'Test Todo')
        self.assertEqual(data['description'], 'This is a test todo')
        self.assertEqual(data['status'], 'pending')

    def test_wrongly_typed_field_is_rejected(self):
        response = self.send('put', self.url(), {'title': 5}, **self.auth_headers())
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['message'], 'Invalid request data')
        self.assertEqual(response.json()['errors'][0]['loc'], ['title'])

        self.todo.refresh_from_db()
        self.assertEqual(self.todo.title, 'Test Todo')

    def test_unparseable_body_is_rejected(self):
        response = self.client.put(self.url(), data='{oops', content_type='application/json', **self.auth_headers())
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'message': 'Cannot parse request body'})

    def test_invalid_status_value(self):
        response = self.send('put', self.url(), {'status': 'done'}, **self.auth_headers())
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'message': 'Invalid status value'})

        self.todo.refresh_from_db()
        self.assertEqual(self.todo.status, TodoStatus.PENDING)

    def test_empty_title_is_rejected(self):
        response = self.send('put', self.url(), {'title': ''}, **self.auth_headers())
        self.assertEqual(response.status_code, 400)
        self.assertIn('title', response.json()['message'])

    def test_owner_is_not_updatable(self):
        response = self.send('put', self.url(), {'owner_id': 'someone-else'}, **self.auth_headers())
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['owner_id'], self.user.id)

    def test_record_deleted_after_guard(self):
        real_save = services.save_todo

        def vanish(record):
            Todo.objects.filter(id=record.id).delete()
            return real_save(record)

        with mock.patch('apps.todos.services.save_todo', side_effect=vanish):
            response = self.send('put', self.url(), {'title': 'Too late'}, **self.auth_headers())

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Todo.objects.filter(id=self.todo.id).exists())


class DeleteTodoTest(TodoAPITestCase):
    def test_delete_returns_deleted_record(self):
        response = self.client.delete(f'/api/todos/{self.todo.id}', **self.auth_headers())
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['id'], self.todo.id)
        self.assertEqual(response.json()['title'], 'Test Todo')
        self.assertFalse(Todo.objects.filter(id=self.todo.id).exists())

    def test_record_vanished_before_delete(self):
        with mock.patch('apps.todos.services.delete_todo', return_value=None):
            response = self.client.delete(f'/api/todos/{self.todo.id}', **self.auth_headers())
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'message': 'Todo Record Not Found'})

    def test_store_rejecting_the_id_maps_to_invalid_id(self):
        with mock.patch('apps.todos.services.delete_todo', side_effect=InvalidObjectId('nope')):
            response = self.client.delete(f'/api/todos/{self.todo.id}', **self.auth_headers())
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'message': 'Invalid Id'})
        self.assertTrue(Todo.objects.filter(id=self.todo.id).exists())

    def test_store_failure_during_delete(self):
        with mock.patch('apps.todos.services.delete_todo', side_effect=DatabaseError('locked')):
            response = self.client.delete(f'/api/todos/{self.todo.id}', **self.auth_headers())
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'message': 'Internal Server Error', 'error': 'locked'})


class EndToEndTest(TestCase):
    def test_register_login_create_fetch_delete(self):
        client = Client()

        def post(url, payload, **headers):
            return client.post(url, data=json.dumps(payload), content_type='application/json', **headers)

        response = post('/api/auth/register', {'username': 'alice', 'password': 'pw1'})
        self.assertEqual(response.status_code, 201)

        response = post('/api/auth/login', {'username': 'alice', 'password': 'pw1'})
        self.assertEqual(response.status_code, 200)
        headers = {'HTTP_AUTHORIZATION': f"Bearer {response.json()['token']}"}

        response = post('/api/todos', {'title': 'Buy milk'}, **headers)
        self.assertEqual(response.status_code, 201)
        created = response.json()
        self.assertEqual(created['status'], 'pending')

        response = client.get(f"/api/todos/{created['id']}", **headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), created)

        response = client.delete(f"/api/todos/{created['id']}", **headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), created)

        response = client.get(f"/api/todos/{created['id']}", **headers)
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {'message': 'Cannot find todo'})
