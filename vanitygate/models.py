from django.db import models

from vanitygate.policy import MAX_WORD_LENGTH


class PaymentRecord(models.Model):
    # Solana signatures are base58 (~88 chars); addresses are base58 (~44 chars).
    signature = models.CharField(max_length=128, unique=True)
    sender = models.CharField(max_length=64)
    receiver = models.CharField(max_length=64)
    amount_lamports = models.BigIntegerField()
    amount_sol = models.DecimalField(max_digits=20, decimal_places=9)
    timestamp = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self) -> str:
        return f'{self.signature} ({self.amount_sol} SOL)'


class VanityOrder(models.Model):
    signature = models.CharField(max_length=128, unique=True)
    payment = models.OneToOneField(
        PaymentRecord,
        on_delete=models.PROTECT,
        related_name='order',
    )
    payer = models.CharField(max_length=64, db_index=True)
    amount_sol = models.DecimalField(max_digits=20, decimal_places=9)
    is_paid = models.BooleanField(default=False)
    is_used = models.BooleanField(default=False)
    # Not transitioned yet; reserved for worker completion.
    is_generated = models.BooleanField(default=False)
    requested_word = models.CharField(max_length=MAX_WORD_LENGTH, blank=True, default='')
    used_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['created_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(is_used=False) | models.Q(is_paid=True),
                name='vanity_order_used_implies_paid',
            ),
        ]

    def __str__(self) -> str:
        return f'{self.signature} ({self.payer})'
