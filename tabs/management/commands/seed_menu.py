from django.core.management.base import BaseCommand
from tables.models import Table, Waiter
from tabs.models import MenuItem


class Command(BaseCommand):
    help = 'Seed the database with menu items, waiters and floor tables'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing menu items before seeding (items already ordered are kept)',
        )
        parser.add_argument(
            '--tables',
            type=int,
            default=10,
            help='Number of floor tables to make sure exist (default: 10)',
        )

    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing unused menu items...')
            MenuItem.objects.filter(orders__isnull=True).delete()
            self.stdout.write(
                self.style.SUCCESS('Successfully cleared menu items')
            )

        menu_items = [
            {"name": "Flat White", "category": "BEVERAGE", "unit_price_p": 350},  # £3.50
            {"name": "Iced Tea", "category": "BEVERAGE", "unit_price_p": 300},  # £3.00
            {"name": "Coca Cola", "category": "BEVERAGE", "unit_price_p": 300},  # £3.00
            {"name": "House Lager", "category": "ALCOHOLIC_BEVERAGE", "unit_price_p": 550},  # £5.50
            {"name": "Garlic Bread", "category": "APPETIZER", "unit_price_p": 500},  # £5.00
            {"name": "Caesar Salad", "category": "APPETIZER", "unit_price_p": 900},  # £9.00
            {"name": "Pizza Margherita", "category": "MAIN_COURSE", "unit_price_p": 1200},  # £12.00
            {"name": "Kids Meal", "category": "MAIN_COURSE", "unit_price_p": 700},  # £7.00
            {"name": "Chips", "category": "SIDE_DISH", "unit_price_p": 350},  # £3.50
            {"name": "Chocolate Cake", "category": "DESSERT", "unit_price_p": 450},  # £4.50
        ]

        created_items = []
        for item_data in menu_items:
            item, created = MenuItem.objects.get_or_create(
                name=item_data['name'],
                defaults={
                    'category': item_data['category'],
                    'unit_price_p': item_data['unit_price_p'],
                }
            )
            if created:
                created_items.append(item)
                self.stdout.write(f"Created: {item.name} - £{item.unit_price_p/100:.2f}")
            else:
                self.stdout.write(f"Already exists: {item.name}")

        self.stdout.write(
            self.style.SUCCESS(f'\nTotal new menu items created: {len(created_items)}')
        )

        waiters = [Waiter.objects.get_or_create(name=name)[0] for name in ('Alex', 'Sam')]

        new_tables = 0
        for number in range(1, options['tables'] + 1):
            _, created = Table.objects.get_or_create(
                number=number,
                defaults={
                    'capacity': 4 if number % 3 else 6,
                    'waiter': waiters[number % len(waiters)],
                }
            )
            new_tables += created
        self.stdout.write(self.style.SUCCESS(f'Total new tables created: {new_tables}'))

        self.stdout.write("\nAll menu items in database:")
        self.stdout.write("-" * 50)
        for item in MenuItem.objects.all().order_by('category', 'name'):
            self.stdout.write(
                f"ID: {item.id:2d} | {item.name:20s} | £{item.unit_price_p/100:6.2f} | {item.category}"
            )
