from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'colleges', views.CollegeViewSet, basename='college')
router.register(r'profiles', views.UserProfileViewSet, basename='profile')
router.register(r'categories', views.EventCategoryViewSet, basename='category')
router.register(r'events', views.EventViewSet, basename='event')
router.register(r'registrations', views.RegistrationViewSet, basename='registration')
router.register(r'attendance', views.AttendanceViewSet, basename='attendance')
router.register(r'feedback', views.FeedbackViewSet, basename='feedback')
router.register(r'notifications', views.NotificationViewSet, basename='notification')

urlpatterns = [
    path('', include(router.urls)),
    path('register/', views.register_user, name='register'),
    path('overview/', views.dashboard_overview, name='dashboard-overview'),
    path('analytics/', views.college_analytics, name='analytics'),
    path('health/', views.health_check, name='health_check'),
]
