from datetime import timedelta

from django.conf import settings
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class College(models.Model):
    name = models.CharField(max_length=200)
    domain = models.CharField(max_length=100)
    contact_email = models.EmailField()
    address = models.TextField(blank=True, null=True)
    settings = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class UserProfile(models.Model):
    ROLES = (
        ('admin', 'Administrator'),
        ('student', 'Student'),
    )

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='profile',
        related_query_name='profile'
    )
    college = models.ForeignKey(College, on_delete=models.CASCADE, related_name='members', null=True, blank=True)
    name = models.CharField(max_length=150)
    role = models.CharField(max_length=20, choices=ROLES, default='student')
    student_id = models.CharField(max_length=50, blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    profile_pic = models.ImageField(upload_to='profile_pics/', null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        college_name = self.college.name if self.college else "No College"
        return f"{self.user.email} - {college_name}"

    @property
    def email(self):
        return self.user.email

    @property
    def is_admin(self):
        return self.role == 'admin' or self.user.is_staff


class EventCategory(models.Model):
    name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, null=True)
    color_code = models.CharField(max_length=7, default='#3B82F6')
    icon = models.CharField(max_length=50, blank=True, null=True)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']
        verbose_name_plural = 'Event categories'

    def __str__(self):
        return self.name


class Event(models.Model):
    STATUS_CHOICES = (
        ('draft', 'Draft'),
        ('published', 'Published'),
        ('cancelled', 'Cancelled'),
        ('completed', 'Completed'),
    )

    college = models.ForeignKey(College, on_delete=models.CASCADE, related_name='events')
    created_by = models.ForeignKey(User, on_delete=models.CASCADE, related_name='created_events')
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, null=True)
    event_type = models.CharField(max_length=50)
    event_date = models.DateTimeField()
    venue = models.CharField(max_length=200)
    capacity = models.PositiveIntegerField(default=100, validators=[MinValueValidator(1)])
    registration_deadline = models.DateTimeField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='draft')
    categories = models.ManyToManyField(EventCategory, through='EventTag', related_name='events', blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=['college', 'status'], name='event_college_status_idx'),
            models.Index(fields=['event_date'], name='event_date_idx'),
        ]

    def clean(self):
        if self.registration_deadline and self.event_date and self.registration_deadline > self.event_date:
            raise ValidationError("Registration deadline cannot be after the event date.")

        # Clash detection
        if self.status == 'published' and self.venue and self.event_date:
            duration = timedelta(hours=settings.EVENT_DURATION_HOURS)
            clashes = Event.objects.filter(
                college_id=self.college_id,
                venue__iexact=self.venue.strip(),
                status='published',
                event_date__gt=self.event_date - duration,
                event_date__lt=self.event_date + duration,
            ).exclude(pk=self.pk)

            clash = clashes.first()
            if clash:
                raise ValidationError(f"Venue clash with event: {clash.title}")

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)

    def __str__(self):
        return self.title

    @property
    def registered_count(self):
        return self.registrations.filter(registration_status__in=['confirmed', 'pending']).count()

    @property
    def seats_left(self):
        return max(self.capacity - self.registered_count, 0)

    @property
    def is_full(self):
        return self.registered_count >= self.capacity


class EventTag(models.Model):
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name='tags')
    category = models.ForeignKey(EventCategory, on_delete=models.CASCADE, related_name='tags')

    class Meta:
        unique_together = ['event', 'category']

    def __str__(self):
        return f"{self.event.title} - {self.category.name}"


class Registration(models.Model):
    REG_STATUS = (
        ('pending', 'Pending'),
        ('confirmed', 'Confirmed'),
        ('cancelled', 'Cancelled'),
        ('waitlisted', 'Waitlisted'),
    )

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name='registrations')
    student = models.ForeignKey(User, on_delete=models.CASCADE, related_name='registrations')
    registration_date = models.DateTimeField(auto_now_add=True)
    registration_status = models.CharField(max_length=20, choices=REG_STATUS, default='confirmed')
    qr_code = models.CharField(max_length=64, unique=True, null=True, blank=True)
    notes = models.TextField(blank=True, null=True)

    class Meta:
        unique_together = ['event', 'student']
        indexes = [
            models.Index(fields=['event', 'registration_status'], name='reg_event_status_idx'),
            models.Index(fields=['student', 'registration_status'], name='reg_student_status_idx'),
        ]

    def save(self, *args, **kwargs):
        if not self.qr_code:
            from .utils import generate_qr_code
            self.qr_code = generate_qr_code(self)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.student.username} - {self.event.title}"


class Attendance(models.Model):
    """
    Check-in record for a registration.
    Created when an administrator scans the registration's QR code or marks
    the student present by hand.
    """
    CHECK_IN_METHODS = (
        ('qr_code', 'QR Code'),
        ('manual', 'Manual'),
        ('mobile_app', 'Mobile App'),
    )

    registration = models.OneToOneField(Registration, on_delete=models.CASCADE, related_name='attendance')
    check_in_method = models.CharField(max_length=20, choices=CHECK_IN_METHODS, default='qr_code')
    checked_in_at = models.DateTimeField(auto_now_add=True)
    checked_out_at = models.DateTimeField(null=True, blank=True)
    duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    checked_in_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='marked_attendance')

    class Meta:
        verbose_name_plural = 'Attendances'

    def __str__(self):
        return f"{self.registration} ({self.checked_in_at})"


class Feedback(models.Model):
    registration = models.OneToOneField(Registration, on_delete=models.CASCADE, related_name='feedback')
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True, null=True)
    anonymous = models.BooleanField(default=False)
    feedback_date = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.registration} ({self.rating} stars)"


class Notification(models.Model):
    NOTIFICATION_TYPES = (
        ('event_reminder', 'Event Reminder'),
        ('registration_confirmation', 'Registration Confirmation'),
        ('event_update', 'Event Updated'),
        ('event_cancelled', 'Event Cancelled'),
    )

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications')
    event = models.ForeignKey(Event, on_delete=models.CASCADE, null=True, blank=True, related_name='notifications')
    type = models.CharField(max_length=50, choices=NOTIFICATION_TYPES)
    title = models.CharField(max_length=200)
    message = models.TextField()
    sent_at = models.DateTimeField(auto_now_add=True)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-sent_at']

    def __str__(self):
        return f"{self.user.username} - {self.title}"

    @property
    def is_read(self):
        return self.read_at is not None


class AnalyticsSummary(models.Model):
    """Per-event aggregate, rebuilt by ``utils.update_event_analytics``."""
    event = models.OneToOneField(Event, on_delete=models.CASCADE, related_name='analytics')
    total_registrations = models.PositiveIntegerField(default=0)
    total_attendance = models.PositiveIntegerField(default=0)
    attendance_percentage = models.FloatField(default=0)
    avg_rating = models.FloatField(null=True, blank=True)
    feedback_count = models.PositiveIntegerField(default=0)
    revenue = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    last_updated = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'Analytics summaries'

    def __str__(self):
        return f"Analytics - {self.event.title}"
