from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import ProfileSetupView, ProfileView, RegisterView, SessionView, SignInView, SignOutView

urlpatterns = [
    # Auth
    path('register/', RegisterView.as_view(), name='register'),
    path('login/', SignInView.as_view(), name='login'),  # POST { "role", "email", "password" }
    path('logout/', SignOutView.as_view(), name='logout'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('session/', SessionView.as_view(), name='session'),

    # Profile
    path('profile/setup/', ProfileSetupView.as_view(), name='profile-setup'),
    path('profile/', ProfileView.as_view(), name='profile'),
]
