from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'payments'

router = DefaultRouter()
router.register(r'', views.PaymentViewSet, basename='payment')

urlpatterns = [
    # GET    /api/payments/                 - List payments
    # POST   /api/payments/                 - Submit payment
    # GET    /api/payments/{id}/            - Payment details
    # POST   /api/payments/{id}/validate/   - Validate (admin)
    # POST   /api/payments/{id}/reject/     - Reject (admin)
    # GET    /api/payments/pending/         - Review queue (admin)
    # POST   /api/payments/manual/          - Manual payment (admin)
    # POST   /api/payments/adjust/          - Balance adjustment (admin)

    # Function views must come before the router's detail route
    path('analyze-receipt/', views.analyze_receipt_view, name='analyze-receipt'),
    path('credits/', views.my_credits, name='my-credits'),
    path('pix/', views.pix_code, name='pix-code'),

    path('', include(router.urls)),
]
