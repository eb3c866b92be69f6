from django.urls import path

from vanitygate.views import ClaimView, HeliusWebhookView, PolicyView

app_name = 'vanitygate'

urlpatterns = [
    path('policy', PolicyView.as_view(), name='policy'),
    path('webhook/helius', HeliusWebhookView.as_view(), name='helius-webhook'),
    path('claim', ClaimView.as_view(), name='claim'),
]
