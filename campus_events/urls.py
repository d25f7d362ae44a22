"""
Root URL configuration: admin site, JWT token endpoints and the events API.
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from rest_framework_simplejwt.views import TokenRefreshView

from events.views import UsernameOrEmailTokenObtainPairView

admin.site.site_header = "Campus Events administration"
admin.site.site_title = "Campus Events"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/token/', UsernameOrEmailTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('api/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('api/', include('events.urls')),
]

if settings.DEBUG:
    # Uploaded profile pictures
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
