import logging
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Q
from django.http import HttpResponse
from django.utils import timezone
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.views import TokenObtainPairView

from . import analytics
from .models import *
from .serializers import *

# Imported after the wildcard imports above, which re-export Django's ValidationError.
from rest_framework.exceptions import ValidationError  # noqa: E402
from .utils import (
    ACTIVE_STATUSES,
    announce_promotion,
    display_name,
    get_user_profile,
    notify_registrants,
    promote_from_waitlist,
    render_qr_png,
    send_notification,
    waitlist_position,
)

logger = logging.getLogger(__name__)

UPCOMING_EVENTS_LIMIT = 6
MONTHLY_WINDOW_DAYS = 365
TREND_WINDOW_DAYS = 90


class IsCollegeAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        if not request.user.is_authenticated:
            return False
        user_profile = get_user_profile(request.user, create_if_missing=True)
        if not user_profile:
            return False
        return user_profile.is_admin


class UsernameOrEmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Extends the default SimpleJWT serializer to accept either username or email.
    """

    def validate(self, attrs):
        identifier = attrs.get(self.username_field)
        if identifier:
            UserModel = get_user_model()
            user_lookup = (
                UserModel.objects.filter(email__iexact=identifier).first()
                or UserModel.objects.filter(username__iexact=identifier).first()
            )
            if user_lookup:
                attrs[self.username_field] = user_lookup.get_username()

        return super().validate(attrs)


class UsernameOrEmailTokenObtainPairView(TokenObtainPairView):
    serializer_class = UsernameOrEmailTokenObtainPairSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register_user(request):
    """
    Sign up a new user and create their profile in the chosen college
    """
    serializer = SignUpSerializer(data=request.data, context={'request': request})
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    with transaction.atomic():
        user = User.objects.create_user(
            username=data['username'],
            email=data['email'],
            password=data['password'],
        )
        # The post_save signal has already created a profile in the default college
        profile = get_user_profile(user, create_if_missing=True)
        profile.name = data['name']
        profile.role = data['role']
        profile.student_id = data.get('student_id') or None
        profile.phone = data.get('phone') or None
        if data.get('college'):
            profile.college = data['college']
        profile.save()

    logger.info("Registered user %s (%s) in college %s", user.pk, profile.role, profile.college_id)
    return Response({
        'message': 'User registered successfully',
        'user': UserSerializer(user).data,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([AllowAny])
def health_check(request):
    return Response({'status': 'ok'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_overview(request):
    """
    Headline counts for the overview page
    """
    profile = get_user_profile(request.user, create_if_missing=True)
    now = timezone.now()
    college_events = Event.objects.filter(college=profile.college)

    return Response({
        'total_events': college_events.count(),
        'upcoming_events': college_events.filter(status='published', event_date__gte=now).count(),
        'total_registrations': Registration.objects.filter(event__college=profile.college).count(),
        'my_registrations': Registration.objects.filter(student=request.user).count(),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def college_analytics(request):
    """
    Chart data for the caller's college
    """
    profile = get_user_profile(request.user, create_if_missing=True)
    college = profile.college
    now = timezone.now()
    college_events = Event.objects.filter(college=college)

    event_types = college_events.order_by('created_at', 'pk').values_list('event_type', flat=True)
    type_distribution = analytics.event_type_distribution(event_types)

    created_dates = college_events.filter(
        created_at__gte=now - timedelta(days=MONTHLY_WINDOW_DAYS)
    ).values_list('created_at', flat=True)
    monthly_events = analytics.monthly_event_counts(timezone.localtime(value) for value in created_dates)

    summaries = AnalyticsSummary.objects.filter(event__college=college).select_related('event')
    rate_rows = summaries.order_by('-attendance_percentage', 'pk')[:analytics.ATTENDANCE_CHART_LIMIT]
    attendance_rates = analytics.attendance_rates(
        {'title': summary.event.title, 'attendance_percentage': summary.attendance_percentage}
        for summary in rate_rows
    )

    top_events = [
        {
            'event_id': summary.event_id,
            'title': summary.event.title,
            'event_date': summary.event.event_date,
            'total_registrations': summary.total_registrations,
            'avg_rating': summary.avg_rating,
        }
        for summary in summaries.order_by('-total_registrations', 'pk')[:analytics.TOP_EVENTS_LIMIT]
    ]

    registration_dates = Registration.objects.filter(
        event__college=college,
        registration_date__gte=now - timedelta(days=TREND_WINDOW_DAYS)
    ).values_list('registration_date', flat=True)
    registration_trends = analytics.daily_registration_counts(
        timezone.localtime(value) for value in registration_dates
    )

    return Response({
        'summary': analytics.summary_cards(monthly_events, registration_trends, attendance_rates, top_events),
        'event_type_distribution': type_distribution,
        'monthly_events': monthly_events,
        'attendance_rates': attendance_rates,
        'top_events': top_events,
        'registration_trends': registration_trends,
    })


class CollegeViewSet(viewsets.ModelViewSet):
    queryset = College.objects.all()
    serializer_class = CollegeSerializer
    permission_classes = [IsAdminUser]

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [AllowAny()]
        return super().get_permissions()


class UserProfileViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = UserProfileSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        if self.request.user.is_staff:
            return UserProfile.objects.select_related('user', 'college')
        return UserProfile.objects.filter(user=self.request.user)

    @action(detail=False, methods=['get'])
    def me(self, request):
        """Get current user with profile, creating the profile on first visit"""
        profile = get_user_profile(request.user, create_if_missing=True)
        return Response({
            'user': UserSerializer(request.user).data,
            'profile': UserProfileSerializer(profile).data,
        })

    @action(detail=False, methods=['patch', 'put'])
    def update_me(self, request):
        """Update current user's profile"""
        profile = get_user_profile(request.user, create_if_missing=True)
        serializer = UserProfileSerializer(profile, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response({
            'user': UserSerializer(request.user).data,
            'profile': serializer.data,
        })


class EventCategoryViewSet(viewsets.ModelViewSet):
    serializer_class = EventCategorySerializer
    permission_classes = [IsCollegeAdmin]

    def get_queryset(self):
        queryset = EventCategory.objects.all()
        if self.action == 'list' and self.request.query_params.get('include_inactive') != 'true':
            queryset = queryset.filter(active=True)
        return queryset.order_by('name')

    def get_permissions(self):
        if self.action in ['list', 'retrieve']:
            return [AllowAny()]
        return super().get_permissions()

    def perform_destroy(self, instance):
        """Soft delete: deactivate so existing tags survive"""
        instance.active = False
        instance.save(update_fields=['active'])


class EventViewSet(viewsets.ModelViewSet):
    serializer_class = EventSerializer
    permission_classes = [IsAuthenticated]
    # Detail actions look the event up by the raw pk
    lookup_value_regex = r'\d+'

    def get_permissions(self):
        if self.action in ['create', 'update', 'partial_update', 'destroy',
                           'publish', 'complete', 'registrations']:
            return [IsCollegeAdmin()]
        return [IsAuthenticated()]

    def get_queryset(self):
        profile = get_user_profile(self.request.user, create_if_missing=True)
        queryset = Event.objects.filter(college=profile.college).select_related(
            'college', 'created_by__profile'
        ).prefetch_related('categories')

        params = self.request.query_params
        if profile.is_admin:
            status_param = params.get('status')
            if status_param and status_param != 'all':
                queryset = queryset.filter(status=status_param)
            queryset = queryset.order_by('-created_at')
        else:
            queryset = queryset.filter(status='published').order_by('event_date')

        search = params.get('search')
        event_type = params.get('event_type')
        category = params.get('category')

        if search:
            queryset = queryset.filter(
                Q(title__icontains=search) |
                Q(description__icontains=search)
            )
        if event_type:
            queryset = queryset.filter(event_type__iexact=event_type)
        if category:
            if not category.isdigit():
                raise ValidationError({'category': ['Category must be a numeric id.']})
            queryset = queryset.filter(categories__id=category)
        if params.get('upcoming') == 'true':
            queryset = queryset.filter(event_date__gte=timezone.now())

        return queryset.distinct()

    def perform_create(self, serializer):
        profile = get_user_profile(self.request.user, create_if_missing=True)
        event = serializer.save(college=profile.college, created_by=self.request.user)
        logger.info("Event %s created by user %s with status %s", event.pk, self.request.user.pk, event.status)

    def perform_update(self, serializer):
        previous_status = serializer.instance.status
        event = serializer.save()

        if event.status == 'cancelled' and previous_status != 'cancelled':
            self._announce_cancellation(event)
        elif previous_status == 'published' and event.status == 'published':
            notify_registrants(
                event,
                title="Event Updated",
                message=f"{event.title} has been updated. Please check the latest details.",
                notification_type='event_update',
                statuses=('confirmed',),
            )

    def perform_destroy(self, instance):
        """Soft delete: mark as cancelled instead of deleting"""
        if instance.status == 'cancelled':
            return
        instance.status = 'cancelled'
        instance.save()
        self._announce_cancellation(instance)

    def _announce_cancellation(self, event):
        logger.info("Event %s cancelled", event.pk)
        notify_registrants(
            event,
            title="Event Cancelled",
            message=f"{event.title} scheduled for {timezone.localtime(event.event_date):%Y-%m-%d %H:%M} has been cancelled.",
            notification_type='event_cancelled',
        )

    def _transition(self, request, from_status, to_status):
        event = self.get_object()
        if event.status != from_status:
            return Response(
                {'error': f'Only {from_status} events can be marked {to_status}'},
                status=status.HTTP_400_BAD_REQUEST
            )
        event.status = to_status
        try:
            event.save()
        except DjangoValidationError as e:
            return Response({'error': ' '.join(e.messages)}, status=status.HTTP_400_BAD_REQUEST)
        serializer = self.get_serializer(event)
        return Response(serializer.data)

    @action(detail=True, methods=['post'])
    def publish(self, request, pk=None):
        return self._transition(request, 'draft', 'published')

    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        return self._transition(request, 'published', 'completed')

    @action(detail=False, methods=['get'])
    def upcoming(self, request):
        profile = get_user_profile(request.user, create_if_missing=True)
        events = Event.objects.filter(
            college=profile.college,
            status='published',
            event_date__gte=timezone.now()
        ).prefetch_related('categories').order_by('event_date')[:UPCOMING_EVENTS_LIMIT]
        serializer = self.get_serializer(events, many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['get'])
    def registrations(self, request, pk=None):
        event = self.get_object()
        registrations = event.registrations.select_related(
            'student__profile', 'attendance'
        ).order_by('-registration_date')
        serializer = EventRegistrantSerializer(registrations, many=True)
        return Response(serializer.data)

    @action(detail=True, methods=['post'])
    def register(self, request, pk=None):
        user = request.user
        profile = get_user_profile(user, create_if_missing=True)
        if profile.is_admin:
            return Response(
                {'error': 'Only students can register for events'},
                status=status.HTTP_403_FORBIDDEN
            )

        with transaction.atomic():
            # Lock the event so capacity checks see a consistent count
            try:
                event = Event.objects.select_for_update().get(pk=pk, college=profile.college)
            except Event.DoesNotExist:
                return Response({'error': 'Event not found'}, status=status.HTTP_404_NOT_FOUND)

            if event.status != 'published':
                return Response(
                    {'error': 'Registration is only open for published events'},
                    status=status.HTTP_400_BAD_REQUEST
                )

            now = timezone.now()
            if event.registration_deadline and now > event.registration_deadline:
                return Response(
                    {'error': 'The registration deadline has passed'},
                    status=status.HTTP_400_BAD_REQUEST
                )
            if event.event_date <= now:
                return Response(
                    {'error': 'This event has already started'},
                    status=status.HTTP_400_BAD_REQUEST
                )

            registration = Registration.objects.filter(event=event, student=user).first()
            if registration and registration.registration_status == 'waitlisted':
                return Response(
                    {'error': 'You are already on the waitlist for this event'},
                    status=status.HTTP_400_BAD_REQUEST
                )
            if registration and registration.registration_status != 'cancelled':
                return Response(
                    {'error': 'Already registered for this event'},
                    status=status.HTTP_400_BAD_REQUEST
                )

            new_status = 'waitlisted' if event.is_full else 'confirmed'
            if registration:
                # Reactivate a cancelled registration at the back of the queue
                registration.registration_status = new_status
                registration.registration_date = now
                registration.save(update_fields=['registration_status', 'registration_date'])
            else:
                registration = Registration.objects.create(
                    event=event,
                    student=user,
                    registration_status=new_status,
                    notes=request.data.get('notes') or None,
                )

        user_name = display_name(user)
        if new_status == 'waitlisted':
            position = waitlist_position(registration)
            send_notification(
                user=user,
                title="Added to Waitlist",
                message=f"{user_name} has been added to the waitlist for {event.title} (Position: {position})",
                notification_type='registration_confirmation',
                event=event
            )
            logger.info("User %s waitlisted for event %s at position %s", user.pk, event.pk, position)
            return Response({
                'status': 'waitlisted',
                'position': position,
                'registration': RegistrationSerializer(registration).data,
            })

        send_notification(
            user=user,
            title="Registration Confirmation",
            message=f"{user_name} has successfully registered for {event.title}",
            notification_type='registration_confirmation',
            event=event
        )
        logger.info("User %s registered for event %s", user.pk, event.pk)
        serializer = RegistrationSerializer(registration)
        return Response(serializer.data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def cancel_registration(self, request, pk=None):
        user = request.user

        with transaction.atomic():
            # Same lock order as register: event row first, then the registration
            event = Event.objects.select_for_update().filter(pk=pk).first()
            registration = None
            if event:
                registration = Registration.objects.select_for_update().filter(
                    event=event, student=user
                ).exclude(registration_status='cancelled').first()
            if not registration:
                return Response(
                    {'error': 'Not registered for this event'},
                    status=status.HTTP_400_BAD_REQUEST
                )
            if Attendance.objects.filter(registration=registration).exists():
                return Response(
                    {'error': 'Cannot cancel a registration that has already checked in'},
                    status=status.HTTP_400_BAD_REQUEST
                )

            held_seat = registration.registration_status in ACTIVE_STATUSES
            registration.registration_status = 'cancelled'
            registration.save(update_fields=['registration_status'])

            promoted = promote_from_waitlist(event) if held_seat else None

        if promoted:
            announce_promotion(promoted)
        send_notification(
            user=user,
            title="Registration Cancelled",
            message=f"{display_name(user)}'s registration for {event.title} has been cancelled",
            notification_type='event_cancelled',
            event=event
        )

        return Response({'status': 'registration_cancelled'})


class RegistrationViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = RegistrationSerializer
    permission_classes = [IsAuthenticated]
    lookup_value_regex = r'\d+'

    def get_queryset(self):
        return Registration.objects.filter(
            student=self.request.user
        ).select_related('event', 'student__profile').order_by('-registration_date')

    @action(detail=True, methods=['get'])
    def qr(self, request, pk=None):
        """PNG QR code of the check-in token"""
        profile = get_user_profile(request.user, create_if_missing=True)
        registration = Registration.objects.filter(pk=pk).select_related('event').first()
        allowed = registration and (
            registration.student_id == request.user.id
            or (profile.is_admin and registration.event.college_id == profile.college_id)
        )
        if not allowed:
            return Response({'error': 'Registration not found'}, status=status.HTTP_404_NOT_FOUND)

        response = HttpResponse(render_qr_png(registration.qr_code), content_type='image/png')
        response['Content-Disposition'] = f'inline; filename="registration-{registration.pk}.png"'
        return response


class AttendanceViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = AttendanceSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        user_profile = get_user_profile(user, create_if_missing=True)
        queryset = Attendance.objects.select_related(
            'registration__event', 'registration__student__profile', 'checked_in_by__profile'
        ).order_by('-checked_in_at')

        # Admins see their college, students see their own check-ins
        if user_profile.is_admin:
            return queryset.filter(registration__event__college=user_profile.college)
        return queryset.filter(registration__student=user)

    def get_permissions(self):
        if self.action in ['check_in', 'check_out']:
            return [IsCollegeAdmin()]
        return super().get_permissions()

    @action(detail=False, methods=['post'])
    def check_in(self, request):
        """Check a registration in by QR token or registration id"""
        serializer = CheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        profile = get_user_profile(request.user, create_if_missing=True)

        with transaction.atomic():
            if data.get('qr_code'):
                registration = Registration.objects.select_for_update().filter(
                    qr_code=data['qr_code']
                ).select_related('event').first()
                method = data.get('check_in_method', 'qr_code')
            else:
                registration = Registration.objects.select_for_update().filter(
                    pk=data['registration'].pk
                ).select_related('event').first()
                method = data.get('check_in_method', 'manual')

            if not registration or registration.event.college_id != profile.college_id:
                return Response({'error': 'Registration not found'}, status=status.HTTP_404_NOT_FOUND)
            if registration.event.status == 'cancelled':
                return Response({'error': 'This event has been cancelled'}, status=status.HTTP_400_BAD_REQUEST)
            if registration.registration_status != 'confirmed':
                return Response(
                    {'error': 'Only confirmed registrations can be checked in'},
                    status=status.HTTP_400_BAD_REQUEST
                )
            if Attendance.objects.filter(registration=registration).exists():
                return Response(
                    {'error': 'Attendance already marked for this registration'},
                    status=status.HTTP_400_BAD_REQUEST
                )

            attendance = Attendance.objects.create(
                registration=registration,
                check_in_method=method,
                checked_in_by=request.user,
            )

        logger.info("Registration %s checked in via %s", registration.pk, method)
        return Response(AttendanceSerializer(attendance).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def check_out(self, request, pk=None):
        attendance = self.get_object()
        if attendance.checked_out_at:
            return Response({'error': 'Already checked out'}, status=status.HTTP_400_BAD_REQUEST)

        attendance.checked_out_at = timezone.now()
        elapsed = attendance.checked_out_at - attendance.checked_in_at
        attendance.duration_minutes = max(int(elapsed.total_seconds() // 60), 0)
        attendance.save(update_fields=['checked_out_at', 'duration_minutes'])
        return Response(AttendanceSerializer(attendance).data)


class FeedbackViewSet(mixins.CreateModelMixin,
                      mixins.ListModelMixin,
                      mixins.RetrieveModelMixin,
                      viewsets.GenericViewSet):
    serializer_class = FeedbackSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        user = self.request.user
        profile = get_user_profile(user, create_if_missing=True)
        queryset = Feedback.objects.select_related(
            'registration__event', 'registration__student__profile'
        ).order_by('-feedback_date')
        if profile.is_admin:
            return queryset.filter(
                Q(registration__event__college=profile.college) | Q(registration__student=user)
            )
        return queryset.filter(registration__student=user)

    def perform_create(self, serializer):
        registration = serializer.validated_data['registration']

        if registration.student_id != self.request.user.id:
            raise ValidationError({
                'registration': ['You can only give feedback on your own registrations.']
            })
        if not Attendance.objects.filter(registration=registration).exists():
            raise ValidationError({
                'registration': ['You can only provide feedback for events you have attended.']
            })

        serializer.save()


class NotificationViewSet(viewsets.ReadOnlyModelViewSet):
    serializer_class = NotificationSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Notification.objects.filter(user=self.request.user).select_related('event').order_by('-sent_at')

    @action(detail=True, methods=['post'])
    def mark_read(self, request, pk=None):
        notification = self.get_object()
        if notification.read_at is None:
            notification.read_at = timezone.now()
            notification.save(update_fields=['read_at'])
        return Response(self.get_serializer(notification).data)

    @action(detail=False, methods=['post'])
    def mark_all_read(self, request):
        updated = Notification.objects.filter(user=request.user, read_at__isnull=True).update(read_at=timezone.now())
        return Response({'status': 'all_notifications_marked_read', 'updated': updated})
