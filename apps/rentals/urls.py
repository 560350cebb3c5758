from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'rentals'

router = DefaultRouter()
router.register(r'', views.RentalViewSet, basename='rental')

urlpatterns = [
    # GET    /api/rentals/                - List rentals
    # POST   /api/rentals/                - Rent a battery
    # GET    /api/rentals/{id}/           - Rental details
    # PATCH  /api/rentals/{id}/return/    - Return the battery
    # PATCH  /api/rentals/{id}/cancel/    - Cancel the rental
    # GET    /api/rentals/{id}/estimate/  - Cost so far
    path('', include(router.urls)),
]
