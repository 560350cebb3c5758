from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'payments'

router = DefaultRouter()
router.register(r'', views.PaymentViewSet, basename='payment')

urlpatterns = [
    # GET    /api/payments/               - List payments
    # POST   /api/payments/               - Record a payment
    # PATCH  /api/payments/bulk/          - Bulk status update (admin)
    # GET    /api/payments/{id}/          - Payment details
    # PATCH  /api/payments/{id}/status/   - Update status (admin/manager)
    # POST   /api/payments/{id}/refund/   - Refund (admin/manager)
    path('', include(router.urls)),
]
