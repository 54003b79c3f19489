import json
from datetime import datetime, timedelta, timezone
from unittest import mock

import jwt
from django.conf import settings
from django.db import DatabaseError
from django.test import TestCase, Client, RequestFactory, override_settings
from ninja.errors import HttpError

from .dtos import AuthenticatedUser
from .jwt_auth import JWT_ALGORITHM, create_access_token, decode_token, get_user_id_from_token
from .models import User
from .security import TokenAuth


def post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type='application/json')


class RegisterAPITest(TestCase):
    def setUp(self):
        self.client = Client()

    def test_register_new_user(self):
        response = post_json(self.client, '/api/auth/register', {'username': 'alice', 'password': 'pw1'})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json(), {'message': 'User registered successfully'})

        user = User.objects.get(username='alice')
        self.assertEqual(len(user.id), 24)
        self.assertNotEqual(user.password, 'pw1')
        self.assertTrue(user.check_password('pw1'))

    def test_register_duplicate_username(self):
        first = post_json(self.client, '/api/auth/register', {'username': 'alice', 'password': 'pw1'})
        second = post_json(self.client, '/api/auth/register', {'username': 'alice', 'password': 'other'})

        self.assertEqual(first.status_code, 201)
        self.assertEqual(second.status_code, 400)
        self.assertEqual(second.json(), {'message': 'Username is already taken'})
        self.assertEqual(User.objects.filter(username='alice').count(), 1)

    def test_register_requires_username_and_password(self):
        for payload in ({'username': 'alice'}, {'password': 'pw1'}, {'username': '', 'password': 'pw1'}):
            response = post_json(self.client, '/api/auth/register', payload)
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.json(), {'message': 'Username and password are required'})
        self.assertFalse(User.objects.exists())

    def test_register_rejects_malformed_json(self):
        response = self.client.post('/api/auth/register', data='{not json', content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('message', response.json())

    def test_register_store_failure(self):
        with mock.patch('apps.identity.api.register_user', side_effect=DatabaseError('disk full')):
            response = post_json(self.client, '/api/auth/register', {'username': 'alice', 'password': 'pw1'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'message': 'disk full'})


class LoginAPITest(TestCase):
    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(username='alice', password='pw1')

    def test_login_returns_token(self):
        response = post_json(self.client, '/api/auth/login', {'username': 'alice', 'password': 'pw1'})
        self.assertEqual(response.status_code, 200)

        token = response.json()['token']
        self.assertTrue(token)
        self.assertEqual(get_user_id_from_token(token), self.user.id)

    def test_login_wrong_password(self):
        response = post_json(self.client, '/api/auth/login', {'username': 'alice', 'password': 'nope'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'message': 'Invalid username or password'})

    def test_login_unknown_user_matches_wrong_password(self):
        unknown = post_json(self.client, '/api/auth/login', {'username': 'bob', 'password': 'pw1'})
        wrong = post_json(self.client, '/api/auth/login', {'username': 'alice', 'password': 'nope'})
        self.assertEqual(unknown.status_code, wrong.status_code)
        self.assertEqual(unknown.json(), wrong.json())

    def test_login_missing_fields(self):
        response = post_json(self.client, '/api/auth/login', {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {'message': 'Invalid username or password'})

    def test_login_unexpected_failure(self):
        with mock.patch('apps.identity.api.create_access_token', side_effect=RuntimeError('signer offline')):
            response = post_json(self.client, '/api/auth/login', {'username': 'alice', 'password': 'pw1'})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'message': 'signer offline'})

    def test_login_store_failure(self):
        with mock.patch('apps.identity.api.verify_credentials', side_effect=DatabaseError('connection lost')):
            response = post_json(self.client, '/api/auth/login', {'username': 'alice', 'password': 'pw1'})
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {'message': 'connection lost'})


class JWTAuthTest(TestCase):
    def test_token_round_trip(self):
        token = create_access_token('65f0a1b2c3d4e5f601234567')
        payload = decode_token(token)
        self.assertEqual(payload['user'], {'id': '65f0a1b2c3d4e5f601234567'})
        self.assertEqual(payload['exp'] - payload['iat'], 3600)

    def test_expired_token(self):
        token = jwt.encode(
            {'user': {'id': 'abc'}, 'exp': datetime.now(timezone.utc) - timedelta(seconds=5)},
            settings.JWT_SECRET,
            algorithm=JWT_ALGORITHM,
        )
        self.assertIsNone(decode_token(token))
        self.assertIsNone(get_user_id_from_token(token))

    def test_token_signed_with_other_secret(self):
        token = create_access_token('abc')
        with override_settings(JWT_SECRET='a-different-secret-that-is-long-enough'):
            self.assertIsNone(get_user_id_from_token(token))

    def test_token_without_user_claim(self):
        token = jwt.encode(
            {'sub': 'abc', 'exp': datetime.now(timezone.utc) + timedelta(minutes=5)},
            settings.JWT_SECRET,
            algorithm=JWT_ALGORITHM,
        )
        self.assertIsNotNone(decode_token(token))
        self.assertIsNone(get_user_id_from_token(token))

    def test_garbage_token(self):
        self.assertIsNone(get_user_id_from_token('not-a-jwt'))


class TokenAuthTest(TestCase):
    def setUp(self):
        self.factory = RequestFactory()
        self.auth = TokenAuth()

    def test_missing_header(self):
        request = self.factory.get('/api/todos')
        with self.assertRaises(HttpError) as ctx:
            self.auth(request)
        self.assertEqual(ctx.exception.status_code, 401)
        self.assertEqual(str(ctx.exception), 'Unauthorized User')

    def test_scheme_without_token(self):
        request = self.factory.get('/api/todos', HTTP_AUTHORIZATION='Bearer')
        with self.assertRaises(HttpError) as ctx:
            self.auth(request)
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(str(ctx.exception), 'Invalid Token')

    def test_invalid_token(self):
        request = self.factory.get('/api/todos', HTTP_AUTHORIZATION='Bearer garbage')
        with self.assertLogs('apps.identity.security', level='WARNING'):
            with self.assertRaises(HttpError) as ctx:
                self.auth(request)
        self.assertEqual(ctx.exception.status_code, 400)

    def test_valid_token_any_scheme(self):
        token = create_access_token('65f0a1b2c3d4e5f601234567')
        for scheme in ('Bearer', 'Token'):
            request = self.factory.get('/api/todos', HTTP_AUTHORIZATION=f'{scheme} {token}')
            self.assertEqual(self.auth(request), AuthenticatedUser(id='65f0a1b2c3d4e5f601234567'))
