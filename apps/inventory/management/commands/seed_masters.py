"""
Management command to seed the District and Article masters.
"""
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.core.models import District
from apps.inventory.models import Article, ItemType

INITIAL_DISTRICTS = [
    ('Chennai', Decimal('500000.00')),
    ('Coimbatore', Decimal('300000.00')),
    ('Madurai', Decimal('300000.00')),
    ('Salem', Decimal('250000.00')),
    ('Tiruchirappalli', Decimal('250000.00')),
    ('Tirunelveli', Decimal('200000.00')),
]

# (name, cost, item type, category)
INITIAL_ARTICLES = [
    ('Sewing Machine', Decimal('7500.00'), ItemType.ARTICLE, 'Livelihood'),
    ('Wheel Chair', Decimal('5200.00'), ItemType.ARTICLE, 'Mobility'),
    ('Notebook', Decimal('45.00'), ItemType.ARTICLE, 'Education'),
    ('Education Aid', Decimal('10000.00'), ItemType.AID, 'Education'),
    ('Medical Aid', Decimal('15000.00'), ItemType.AID, 'Medical'),
    ('Marriage Aid', Decimal('20000.00'), ItemType.AID, 'Marriage'),
    ('Hall Renovation', Decimal('0.00'), ItemType.PROJECT, 'Infrastructure'),
]


class Command(BaseCommand):
    help = 'Seed initial Districts and Articles'

    def add_arguments(self, parser):
        parser.add_argument(
            '--skip-articles',
            action='store_true',
            help='Seed districts only'
        )

    @transaction.atomic
    def handle(self, *args, **options):
        district_count = 0
        for name, budget in INITIAL_DISTRICTS:
            _, created = District.objects.get_or_create(
                district_name=name,
                defaults={'allotted_budget': budget}
            )
            if created:
                district_count += 1
                self.stdout.write(f'Created district: {name}')

        article_count = 0
        if not options['skip_articles']:
            for name, cost, item_type, category in INITIAL_ARTICLES:
                _, created = Article.objects.get_or_create(
                    article_name=name,
                    item_type=item_type,
                    defaults={'cost_per_unit': cost, 'category': category}
                )
                if created:
                    article_count += 1
                    self.stdout.write(f'Created article: {name}')

        self.stdout.write(self.style.SUCCESS(
            f'Successfully seeded {district_count} districts and {article_count} articles.'
        ))
