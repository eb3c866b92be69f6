from django.contrib import admin

from vanitygate.models import PaymentRecord, VanityOrder


@admin.register(PaymentRecord)
class PaymentRecordAdmin(admin.ModelAdmin):
    list_display = ("signature", "sender", "receiver", "amount_sol", "timestamp", "created_at")
    search_fields = ("signature", "sender", "receiver")


@admin.register(VanityOrder)
class VanityOrderAdmin(admin.ModelAdmin):
    list_display = ("signature", "payer", "amount_sol", "is_paid", "is_used", "is_generated", "used_at")
    list_filter = ("is_paid", "is_used", "is_generated")
    search_fields = ("signature", "payer", "requested_word")
    readonly_fields = ("signature", "payment", "payer", "amount_sol", "is_paid", "is_used", "used_at")
