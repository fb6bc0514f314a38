from django.urls import path
from . import views

app_name = 'booking'

urlpatterns = [
	path('book', views.book, name='book'),
	path('slots', views.slots, name='slots'),
	path('auth/phone/start', views.phone_start, name='phone_start'),
	path('auth/phone/verify', views.phone_verify, name='phone_verify'),
	path('auth/customer', views.customer_profile, name='customer_profile'),
	path('auth/customer/logout', views.customer_logout, name='customer_logout'),
	path('customer/appointments', views.customer_appointments, name='customer_appointments'),
]
