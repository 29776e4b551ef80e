from django.urls import path

from server.apps.users import views

app_name = 'users'

urlpatterns = [
    path('auth/login', views.login_view, name='login'),
    path('user/create', views.create_user, name='create'),
    path('user/check-email', views.check_email, name='check_email'),
]
