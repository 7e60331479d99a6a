"""
Token authentication for homestay owners.

Owners sign in with their homestay ID and generated password; they are not
Django users. Their tokens carry a distinct token type, so a user's access
token is refused here and an owner's token is refused by the user endpoints.
"""
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import BasePermission
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.tokens import Token

from .models import Homestay

HOMESTAY_ID_CLAIM = 'homestay_id'


class HomestayAccessToken(Token):
    token_type = 'homestay_access'
    lifetime = settings.HOMESTAY_TOKEN_LIFETIME

    @classmethod
    def for_homestay(cls, homestay):
        token = cls()
        token[HOMESTAY_ID_CLAIM] = homestay.homestay_id
        token['name'] = homestay.name
        return token


class HomestayPrincipal:
    """`request.user` for a request made with a homestay owner's token"""
    is_authenticated = True
    is_anonymous = False
    is_superadmin = False
    is_tenant_admin = False
    is_officer = False
    role = 'homestay'

    def __init__(self, homestay):
        self.homestay = homestay
        self.username = homestay.homestay_id

    def __str__(self):
        return self.username

    def has_flag(self, flag):
        return False


class HomestayJWTAuthentication(JWTAuthentication):
    def get_validated_token(self, raw_token):
        try:
            return HomestayAccessToken(raw_token)
        except TokenError as e:
            raise InvalidToken({
                'detail': 'Given token not valid for homestay access',
                'messages': [{'token_class': 'HomestayAccessToken', 'message': str(e)}],
            })

    def get_user(self, validated_token):
        homestay_id = validated_token.get(HOMESTAY_ID_CLAIM)
        if not homestay_id:
            raise InvalidToken('Token contained no homestay identification')
        try:
            homestay = Homestay.objects.get(homestay_id=homestay_id)
        except Homestay.DoesNotExist:
            raise AuthenticationFailed('Homestay not found', code='homestay_not_found')
        return HomestayPrincipal(homestay)


class IsHomestayOwner(BasePermission):
    message = 'Only homestay owners can access this resource.'

    def has_permission(self, request, view):
        return isinstance(request.user, HomestayPrincipal)
