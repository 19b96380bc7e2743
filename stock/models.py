from django.db import models
from django.utils.translation import gettext_lazy as _

from configurations.base_features.constants import SYSTEM_PERFORMER
from configurations.base_features.db.base_model import BaseModel, VersionedModel


class StockItem(VersionedModel):
    """On-hand stock of one item. `quantity` is maintained by the movement ledger only."""

    class GroupCode(models.TextChoices):
        RAW = 'RAW', _('Raw material')
        CONS = 'CONS', _('Consumable')
        FG = 'FG', _('Finished goods')

    item_code = models.CharField(_("Item Code"), max_length=100, unique=True)
    item_name = models.CharField(_("Item Name"), max_length=255)
    group_code = models.CharField(_("Group"), max_length=10, choices=GroupCode.choices, default=GroupCode.RAW)
    unit = models.CharField(max_length=20, default='pcs')
    location = models.CharField(max_length=255, blank=True)
    machine = models.CharField(max_length=100, blank=True)
    status = models.CharField(max_length=50, blank=True)
    quantity = models.DecimalField(_("Quantity"), max_digits=12, decimal_places=3, default=0, editable=False)
    last_updated = models.DateTimeField(null=True, blank=True, editable=False)

    class Meta:
        ordering = ['item_code']
        indexes = [
            models.Index(fields=['group_code']),
        ]

    def __str__(self):
        return f"{self.item_code} - {self.item_name}"


class StockMovement(BaseModel):
    """Immutable ledger entry. Only the one-time reversal stamp changes after insert."""

    class Action(models.TextChoices):
        ISSUE = 'ISSUE', _('Issue')
        ADD = 'ADD', _('Add')
        ADJUST = 'ADJUST', _('Adjust')

    class TargetType(models.TextChoices):
        WORK_ORDER = 'WORK_ORDER', _('Work order')
        OTHER = 'OTHER', _('Other')

    item = models.ForeignKey(StockItem, on_delete=models.PROTECT, related_name='movements')
    action = models.CharField(_("Action"), max_length=10, choices=Action.choices)
    qty = models.DecimalField(
        _("Quantity Delta"),
        max_digits=12,
        decimal_places=3,
        help_text="Signed quantity: positive increases stock, negative decreases"
    )
    reason = models.TextField(blank=True)
    target_type = models.CharField(max_length=20, choices=TargetType.choices, default=TargetType.OTHER)
    work_order = models.ForeignKey(
        "work_orders.WorkOrder",
        on_delete=models.SET_NULL,
        related_name="stock_movements",
        null=True,
        blank=True
    )
    performed_by = models.CharField(max_length=150, default=SYSTEM_PERFORMER)
    reversed_at = models.DateTimeField(null=True, blank=True)
    reversed_by = models.CharField(max_length=150, blank=True)
    reversal_of = models.OneToOneField(
        'self',
        on_delete=models.PROTECT,
        related_name='reversal',
        null=True,
        blank=True,
        help_text="The ISSUE movement this entry compensates"
    )

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['item', 'created_at']),
            models.Index(fields=['work_order', 'created_at']),
        ]

    def __str__(self):
        return f"{self.action} {self.qty} {self.item_id}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError("Stock movements are immutable once recorded")
        super().save(*args, **kwargs)

    @property
    def is_reversed(self):
        return self.reversed_at is not None
