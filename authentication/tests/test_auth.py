from rest_framework import status
from rest_framework.test import APITestCase

from authentication.models import AuditLog, User
from authentication.permissions import is_admin
from orders.tests.helpers import make_admin, make_user

PASSWORD = 'Str0ng-Passw0rd!'


class RegistrationTest(APITestCase):

    def test_register_grants_customer_role(self):
        response = self.client.post('/api/auth/register/', {
            'email': 'Nadia@Example.com',
            'username': 'nadia',
            'password': PASSWORD,
            'password_confirm': PASSWORD,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data['tokens'])
        user = User.objects.get(username='nadia')
        self.assertEqual(user.email, 'nadia@example.com')
        self.assertTrue(user.has_role('CUSTOMER'))
        self.assertFalse(is_admin(user))

    def test_password_mismatch(self):
        response = self.client.post('/api/auth/register/', {
            'email': 'nadia@example.com',
            'username': 'nadia',
            'password': PASSWORD,
            'password_confirm': 'something-else',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password_confirm', response.data['fields'])


class LoginTest(APITestCase):

    def setUp(self):
        self.user = make_user('karim')

    def test_login_issues_tokens_usable_on_api(self):
        response = self.client.post('/api/auth/login/', {'email': 'karim@example.com', 'password': PASSWORD}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(AuditLog.objects.filter(action='LOGIN', user=self.user).exists())

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['tokens']['access']}")
        me = self.client.get('/api/auth/me/')
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data['email'], 'karim@example.com')

    def test_repeated_failures_lock_account(self):
        for _attempt in range(5):
            self.client.post('/api/auth/login/', {'email': 'karim@example.com', 'password': 'wrong'}, format='json')

        response = self.client.post('/api/auth/login/', {'email': 'karim@example.com', 'password': PASSWORD}, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.user.refresh_from_db()
        self.assertTrue(self.user.is_account_locked)

    def test_successful_login_resets_failure_count(self):
        for _attempt in range(2):
            self.client.post('/api/auth/login/', {'email': 'karim@example.com', 'password': 'wrong'}, format='json')

        response = self.client.post('/api/auth/login/', {'email': 'karim@example.com', 'password': PASSWORD}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.failed_login_attempts, 0)
        self.assertFalse(self.user.is_account_locked)


class ProfileTest(APITestCase):

    def setUp(self):
        self.user = make_user('salma')
        self.client.force_authenticate(self.user)

    def test_read_profile(self):
        response = self.client.get('/api/auth/me/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['email'], 'salma@example.com')
        self.assertFalse(response.data['isAdmin'])

    def test_update_saved_address(self):
        response = self.client.patch(
            '/api/auth/me/', {'phone_number': '+8801711111111', 'district': 'Sylhet', 'address': 'Zindabazar'},
            format='json',
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.district, 'Sylhet')
        self.assertEqual(self.user.address, 'Zindabazar')

    def test_email_is_not_editable(self):
        response = self.client.patch('/api/auth/me/', {'email': 'other@example.com'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.user.refresh_from_db()
        self.assertEqual(self.user.email, 'salma@example.com')

    def test_invalid_phone_rejected(self):
        response = self.client.patch('/api/auth/me/', {'phone_number': 'call me'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('phone_number', response.data['fields'])


class RoleTest(APITestCase):

    def test_admin_role_and_superuser_are_admins(self):
        superuser = User.objects.create_superuser(username='root', email='root@example.com', password=PASSWORD)

        self.assertTrue(is_admin(make_admin()))
        self.assertTrue(is_admin(superuser))
        self.assertFalse(is_admin(make_user()))
