"""
Cache invalidation signals
Drop the cached public detail when a homestay or its people change
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .cache import invalidate_homestay_detail
from .models import Homestay, Official, Contact


@receiver(post_save, sender=Homestay)
@receiver(post_delete, sender=Homestay)
def invalidate_homestay_on_change(sender, instance, **kwargs):
    invalidate_homestay_detail(instance.homestay_id)


@receiver(post_save, sender=Official)
@receiver(post_delete, sender=Official)
@receiver(post_save, sender=Contact)
@receiver(post_delete, sender=Contact)
def invalidate_homestay_on_related_change(sender, instance, **kwargs):
    homestay = Homestay.objects.filter(pk=instance.homestay_id).values_list('homestay_id', flat=True).first()
    invalidate_homestay_detail(homestay)
