from django.contrib import admin
from .models import *


class EventTagInline(admin.TabularInline):
    model = EventTag
    extra = 0


@admin.register(College)
class CollegeAdmin(admin.ModelAdmin):
    list_display = ['name', 'domain', 'contact_email', 'created_at']
    search_fields = ['name', 'domain']


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'college', 'role', 'student_id']
    list_filter = ['role', 'college']
    search_fields = ['name', 'user__email', 'student_id']


@admin.register(EventCategory)
class EventCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'color_code', 'active']
    list_filter = ['active']


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    list_display = ['title', 'college', 'event_type', 'event_date', 'venue', 'capacity', 'status']
    list_filter = ['status', 'college', 'event_type']
    search_fields = ['title', 'venue']
    inlines = [EventTagInline]


@admin.register(Registration)
class RegistrationAdmin(admin.ModelAdmin):
    list_display = ['event', 'student', 'registration_status', 'registration_date']
    list_filter = ['registration_status']
    readonly_fields = ['qr_code']


@admin.register(Attendance)
class AttendanceAdmin(admin.ModelAdmin):
    list_display = ['registration', 'check_in_method', 'checked_in_at', 'checked_out_at', 'duration_minutes']


@admin.register(AnalyticsSummary)
class AnalyticsSummaryAdmin(admin.ModelAdmin):
    list_display = ['event', 'total_registrations', 'total_attendance', 'attendance_percentage', 'avg_rating']
    readonly_fields = ['last_updated']


admin.site.register([Feedback, Notification])
