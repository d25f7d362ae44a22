from django.contrib.auth.models import User
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from .models import *
from .utils import combine_date_time, display_name


class CollegeSerializer(serializers.ModelSerializer):
    class Meta:
        model = College
        fields = '__all__'


class UserProfileSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='user.email', read_only=True)
    college_name = serializers.SerializerMethodField()

    class Meta:
        model = UserProfile
        fields = ['id', 'user', 'name', 'email', 'role', 'college', 'college_name',
                  'student_id', 'phone', 'profile_pic', 'created_at']
        read_only_fields = ['user', 'role', 'college', 'created_at']

    def get_college_name(self, obj):
        return obj.college.name if obj.college else None


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'first_name', 'last_name']

    def to_representation(self, instance):
        representation = super().to_representation(instance)
        profile_instance = getattr(instance, 'profile', None)
        representation['profile'] = UserProfileSerializer(profile_instance).data if profile_instance else None
        representation['role'] = profile_instance.role if profile_instance else None
        return representation


class SignUpSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6)
    name = serializers.CharField(max_length=150)
    username = serializers.CharField(max_length=150, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=UserProfile.ROLES, default='student')
    college_id = serializers.PrimaryKeyRelatedField(
        queryset=College.objects.all(), source='college', required=False, allow_null=True
    )
    student_id = serializers.CharField(max_length=50, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)

    def validate_email(self, value):
        if User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("Email already exists")
        return value

    def validate(self, attrs):
        username = attrs.get('username') or attrs['email']
        if User.objects.filter(username__iexact=username).exists():
            raise serializers.ValidationError({'username': "Username already exists"})
        attrs['username'] = username

        request = self.context.get('request')
        if attrs.get('role') == 'admin' and not (request and request.user.is_staff):
            raise serializers.ValidationError({'role': "Only staff can create administrator accounts"})
        return attrs


class EventCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = EventCategory
        fields = '__all__'


class EventSerializer(serializers.ModelSerializer):
    college_name = serializers.CharField(source='college.name', read_only=True)
    created_by_name = serializers.SerializerMethodField()
    registrations_count = serializers.IntegerField(source='registered_count', read_only=True)
    seats_left = serializers.ReadOnlyField()
    is_full = serializers.ReadOnlyField()
    category_names = serializers.SerializerMethodField()
    category_ids = serializers.PrimaryKeyRelatedField(
        queryset=EventCategory.objects.filter(active=True), many=True, write_only=True, required=False
    )
    user_registration_status = serializers.SerializerMethodField()

    # Form-style inputs, combined into event_date / registration_deadline
    date = serializers.CharField(write_only=True, required=False)
    time = serializers.CharField(write_only=True, required=False)
    deadline_date = serializers.CharField(write_only=True, required=False, allow_blank=True)
    deadline_time = serializers.CharField(write_only=True, required=False, allow_blank=True)

    class Meta:
        model = Event
        fields = '__all__'
        read_only_fields = ['college', 'created_by', 'created_at', 'updated_at', 'categories']
        extra_kwargs = {'event_date': {'required': False}}

    def get_created_by_name(self, obj):
        return display_name(obj.created_by)

    def get_category_names(self, obj):
        return [category.name for category in obj.categories.all()]

    def get_user_registration_status(self, obj):
        request = self.context.get('request')
        if request and request.user.is_authenticated:
            registration = Registration.objects.filter(event=obj, student=request.user).first()
            return registration.registration_status if registration else None
        return None

    def validate_status(self, value):
        if self.instance is None:
            if value not in ('draft', 'published'):
                raise serializers.ValidationError("New events must be draft or published.")
        elif value != self.instance.status and value != 'cancelled':
            # Lifecycle moves go through the publish and complete actions
            raise serializers.ValidationError(
                f"Cannot change status from {self.instance.status} to {value} here; "
                "use the publish or complete actions."
            )
        return value

    def validate(self, attrs):
        date_str = attrs.pop('date', None)
        time_str = attrs.pop('time', None)
        deadline_date = attrs.pop('deadline_date', None)
        deadline_time = attrs.pop('deadline_time', None)

        if date_str and time_str:
            try:
                attrs['event_date'] = combine_date_time(date_str, time_str)
            except ValueError:
                raise serializers.ValidationError({'event_date': "Invalid date or time provided."})
        if deadline_date and deadline_time:
            try:
                attrs['registration_deadline'] = combine_date_time(deadline_date, deadline_time)
            except ValueError:
                raise serializers.ValidationError({'registration_deadline': "Invalid deadline provided."})

        if self.instance is None and not attrs.get('event_date'):
            raise serializers.ValidationError({'event_date': "This field is required."})

        for field in ('title', 'venue', 'event_type'):
            if field in attrs:
                attrs[field] = attrs[field].strip()
        return attrs

    def _save_with_clean(self, instance, validated_data):
        categories = validated_data.pop('category_ids', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        try:
            instance.save()
        except DjangoValidationError as e:
            raise serializers.ValidationError({'error': e.messages})
        if categories is not None:
            EventTag.objects.filter(event=instance).exclude(category__in=categories).delete()
            for category in categories:
                EventTag.objects.get_or_create(event=instance, category=category)
        return instance

    def create(self, validated_data):
        return self._save_with_clean(Event(), validated_data)

    def update(self, instance, validated_data):
        return self._save_with_clean(instance, validated_data)


class EventSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Event
        fields = ['id', 'title', 'event_date', 'venue', 'status']


class RegistrationSerializer(serializers.ModelSerializer):
    event = EventSummarySerializer(read_only=True)
    student_name = serializers.SerializerMethodField()
    checked_in = serializers.SerializerMethodField()

    class Meta:
        model = Registration
        fields = ['id', 'event', 'student', 'student_name', 'registration_date',
                  'registration_status', 'qr_code', 'notes', 'checked_in']
        read_only_fields = ['student', 'registration_date', 'registration_status', 'qr_code']

    def get_student_name(self, obj):
        return display_name(obj.student)

    def get_checked_in(self, obj):
        return hasattr(obj, 'attendance')


class EventRegistrantSerializer(serializers.ModelSerializer):
    student_name = serializers.SerializerMethodField()
    student_email = serializers.CharField(source='student.email', read_only=True)
    checked_in = serializers.SerializerMethodField()

    class Meta:
        model = Registration
        fields = ['id', 'student', 'student_name', 'student_email', 'registration_date',
                  'registration_status', 'qr_code', 'checked_in']

    def get_student_name(self, obj):
        return display_name(obj.student)

    def get_checked_in(self, obj):
        return hasattr(obj, 'attendance')


class AttendanceSerializer(serializers.ModelSerializer):
    event_id = serializers.IntegerField(source='registration.event.id', read_only=True)
    event_title = serializers.CharField(source='registration.event.title', read_only=True)
    student_name = serializers.SerializerMethodField()
    checked_in_by_name = serializers.SerializerMethodField()

    class Meta:
        model = Attendance
        fields = '__all__'
        read_only_fields = ['checked_in_at', 'checked_out_at', 'duration_minutes', 'checked_in_by']

    def get_student_name(self, obj):
        return display_name(obj.registration.student)

    def get_checked_in_by_name(self, obj):
        return display_name(obj.checked_in_by) if obj.checked_in_by else None


class CheckInSerializer(serializers.Serializer):
    qr_code = serializers.CharField(required=False)
    registration = serializers.PrimaryKeyRelatedField(queryset=Registration.objects.all(), required=False)
    check_in_method = serializers.ChoiceField(choices=Attendance.CHECK_IN_METHODS, required=False)

    def validate(self, attrs):
        if not attrs.get('qr_code') and not attrs.get('registration'):
            raise serializers.ValidationError("Provide either qr_code or registration.")
        return attrs


class FeedbackSerializer(serializers.ModelSerializer):
    event_id = serializers.IntegerField(source='registration.event.id', read_only=True)
    event_title = serializers.CharField(source='registration.event.title', read_only=True)
    student_name = serializers.SerializerMethodField()

    class Meta:
        model = Feedback
        fields = '__all__'
        read_only_fields = ['feedback_date']

    def get_student_name(self, obj):
        if obj.anonymous:
            return None
        return display_name(obj.registration.student)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        request = self.context.get('request')
        viewer_id = request.user.id if request else None
        if instance.anonymous and viewer_id != instance.registration.student_id:
            data['registration'] = None
        return data

    def validate_rating(self, value):
        """Validate rating is between 1 and 5"""
        if value < 1 or value > 5:
            raise serializers.ValidationError("Rating must be between 1 and 5.")
        return value


class NotificationSerializer(serializers.ModelSerializer):
    event_title = serializers.CharField(source='event.title', read_only=True, default=None)
    is_read = serializers.ReadOnlyField()

    class Meta:
        model = Notification
        fields = '__all__'
        read_only_fields = ['user', 'event', 'type', 'title', 'message', 'sent_at', 'read_at']


class AnalyticsSummarySerializer(serializers.ModelSerializer):
    title = serializers.CharField(source='event.title', read_only=True)
    event_date = serializers.DateTimeField(source='event.event_date', read_only=True)

    class Meta:
        model = AnalyticsSummary
        fields = '__all__'
