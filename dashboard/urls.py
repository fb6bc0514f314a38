from django.urls import path
from . import views

app_name = 'dashboard'

urlpatterns = [
    path('appointments', views.appointments, name='appointments'),
    path('appointments/stats', views.stats, name='stats'),
    path('appointments/<str:appointment_id>', views.appointment_detail, name='appointment_detail'),
    path('update', views.update, name='update'),
    path('auth/login', views.login, name='login'),
    path('auth/logout', views.logout, name='logout'),
    path('auth/check', views.auth_check, name='auth_check'),
]
