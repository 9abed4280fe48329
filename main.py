"""
Supermarket Inventory System - Main Application
A role-based CLI for managing the product catalog and processing sales
"""

import enum
import logging
from pathlib import Path
from typing import Dict, List, Optional, TextIO

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import Prompt, IntPrompt, FloatPrompt, Confirm
from rich.markup import escape
from rich import box

from config import (
    DATABASE_URL, EXPORT_DIR, INVENTORY_FILE_PREFIX, RECEIPT_FILE_PREFIX,
    configure_logging
)
from models import OperationResult
from inventory_manager import InventoryManager
from receipt import Receipt
from alert_system import AlertSystem, ConsoleAlertObserver
from exporter import export_printable

logger = logging.getLogger(__name__)


class Role(enum.Enum):
    """Fixed roles offered at the login menu"""
    ADMIN = "Admin"
    INVENTORY_MANAGER = "Inventory Manager"
    CASHIER = "Cashier"


OPERATION_LABELS = {
    "insert": "Insert Product",
    "delete": "Delete Product",
    "restock": "Restock",
    "sell": "Sell Product",
    "show": "Show Inventory",
    "export_inventory": "Export Inventory",
    "export_receipt": "Export Receipt",
    "history": "Transaction History",
}

# Menu order per role; "Back" is always appended as the last number
ROLE_OPERATIONS: Dict[Role, List[str]] = {
    Role.ADMIN: ["insert", "delete", "restock", "sell", "show",
                 "export_inventory", "export_receipt", "history"],
    Role.INVENTORY_MANAGER: ["insert", "delete", "restock", "show", "export_inventory"],
    Role.CASHIER: ["sell", "show", "export_receipt"],
}

ROLE_CHOICES = {1: Role.ADMIN, 2: Role.INVENTORY_MANAGER, 3: Role.CASHIER}
EXIT_CHOICE = 4


class ConsoleUI:
    """Console helpers shared by the login menu and the role menus"""

    def __init__(self, console: Optional[Console] = None, stream: Optional[TextIO] = None):
        self.console = console or Console()
        # stream replaces stdin when set
        self.stream = stream

    def clear_screen(self):
        """Clear the terminal screen"""
        self.console.clear()

    def print_header(self, title: str):
        """Print a styled header"""
        self.console.print(Panel(title, style="bold blue", box=box.DOUBLE))

    def print_success(self, message: str):
        self.console.print(f"✅ {message}", style="bold green", markup=False)

    def print_error(self, message: str):
        self.console.print(f"❌ {message}", style="bold red", markup=False)

    def print_warning(self, message: str):
        self.console.print(f"⚠️  {message}", style="bold yellow", markup=False)

    def print_info(self, message: str):
        self.console.print(f"ℹ️  {message}", style="bold cyan", markup=False)

    def report(self, result: OperationResult):
        """Print the outcome of an operation"""
        if result:
            self.print_success(result.message)
        else:
            self.print_error(result.message)

    def get_input(self, prompt: str, default: str = ...) -> str:
        """Get string input from user"""
        return Prompt.ask(prompt, default=default, console=self.console, stream=self.stream)

    def get_int(self, prompt: str, default: int = ...) -> int:
        """Get integer input, asking again until it parses"""
        return IntPrompt.ask(prompt, default=default, console=self.console, stream=self.stream)

    def get_float(self, prompt: str, default: float = ...) -> float:
        """Get decimal input, asking again until it parses"""
        return FloatPrompt.ask(prompt, default=default, console=self.console, stream=self.stream)

    def confirm(self, prompt: str, default: bool = False) -> bool:
        """Get yes/no confirmation from user"""
        return Confirm.ask(prompt, default=default, console=self.console, stream=self.stream)

    def wait_for_key(self):
        """Wait for user to press Enter"""
        self.console.input("\nPress Enter to continue...", stream=self.stream)


class RoleMenu:
    """
    Menu for one role session

    Holds references to the application's inventory and receipt for as long
    as the session lasts; every operation goes through their public methods.
    """

    def __init__(self, role: Role, inventory: InventoryManager, receipt: Receipt,
                 ui: ConsoleUI, export_dir: Path = EXPORT_DIR):
        self.role = role
        self.inventory = inventory
        self.receipt = receipt
        self.ui = ui
        self.export_dir = export_dir
        self.operations = ROLE_OPERATIONS[role]
        self.back_choice = len(self.operations) + 1
        self._handlers = {
            "insert": self.insert_product,
            "delete": self.delete_product,
            "restock": self.restock_product,
            "sell": self.sell_product,
            "show": self.show_inventory,
            "export_inventory": self.export_inventory,
            "export_receipt": self.export_receipt,
            "history": self.view_transactions,
        }

    def show(self):
        """Run the menu until the user goes back"""
        while True:
            self.ui.clear_screen()
            self.show_options()

            choice = self.ui.get_int("Choice")
            if choice == self.back_choice:
                break

            self.process_choice(choice)

    def show_options(self):
        self.ui.print_header(f"{self.role.value.upper()} MENU")

        table = Table(show_header=False, box=box.ROUNDED)
        table.add_column("Option", style="cyan", width=4)
        table.add_column("Description", style="white")
        for number, operation in enumerate(self.operations, 1):
            table.add_row(str(number), OPERATION_LABELS[operation])
        table.add_row(str(self.back_choice), "Back")
        self.ui.console.print(table)

    def process_choice(self, choice: int):
        self.ui.clear_screen()
        if 1 <= choice <= len(self.operations):
            self._handlers[self.operations[choice - 1]]()
        else:
            self.ui.print_error("Invalid choice.")
        self.ui.wait_for_key()

    # ==================== Operations ====================

    def insert_product(self):
        self.ui.print_header("➕ Insert Product")
        product_id = self.ui.get_int("Enter product ID")
        name = self.ui.get_input("Enter product name")
        if not name:
            self.ui.print_error("Product name is required.")
            return
        quantity = self.ui.get_int("Enter quantity")
        price = self.ui.get_float("Enter price")

        result = self.inventory.insert_product(product_id, name, quantity, price,
                                               performed_by=self.role.value)
        self.ui.report(result)

    def delete_product(self):
        self.ui.print_header("🗑️ Delete Product")
        product_id = self.ui.get_int("Enter product ID to delete")
        self.ui.report(self.inventory.delete_product(product_id, performed_by=self.role.value))

    def restock_product(self):
        self.ui.print_header("📦 Restock Product")
        product_id = self.ui.get_int("Enter product ID")
        amount = self.ui.get_int("Enter amount to restock")
        self.ui.report(self.inventory.restock_product(product_id, amount,
                                                      performed_by=self.role.value))

    def sell_product(self):
        self.ui.print_header("💰 Sell Product")
        product_id = self.ui.get_int("Enter product ID")
        amount = self.ui.get_int("Enter quantity to sell")

        result = self.inventory.sell_product(product_id, amount, performed_by=self.role.value)
        if result:
            item = result.sold_item
            self.receipt.add_item(item.name, item.quantity, item.unit_price)
        self.ui.report(result)

    def show_inventory(self):
        self.ui.print_header("📋 Inventory Status")
        products = self.inventory.snapshot()
        if not products:
            self.ui.print_warning("No products.")
            return
        for product in products:
            self.ui.console.print(product.to_display_line(), markup=False, highlight=False)

    def export_inventory(self):
        result = export_printable(self.inventory, INVENTORY_FILE_PREFIX, self.export_dir)
        self.ui.report(result)

    def export_receipt(self):
        if self.receipt.is_empty():
            self.ui.print_error("No items in receipt to export.")
            return

        result = export_printable(self.receipt, RECEIPT_FILE_PREFIX, self.export_dir)
        self.ui.report(result)
        if result and self.ui.confirm("Start a new receipt?", False):
            self.receipt.clear()
            self.ui.print_info("Receipt cleared.")

    def view_transactions(self):
        self.ui.print_header("📜 Transaction History")
        transactions = self.inventory.get_transactions(limit=20)
        if not transactions:
            self.ui.print_warning("No transactions recorded.")
            return

        table = Table(box=box.ROUNDED)
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Product", style="white")
        table.add_column("Type", style="magenta")
        table.add_column("Change", justify="right")
        table.add_column("Stock", justify="right")
        table.add_column("By", style="yellow")
        for t in transactions:
            table.add_row(
                str(t.id),
                escape(f"{t.product_id} {t.product_name}"),
                t.transaction_type.value,
                f"{t.quantity:+d}",
                f"{t.previous_stock} -> {t.new_stock}",
                escape(t.performed_by or "")
            )
        self.ui.console.print(table)


class SupermarketApp:
    """Main application class: owns the inventory and the receipt"""

    def __init__(self, db_url: str = DATABASE_URL, console: Optional[Console] = None,
                 stream: Optional[TextIO] = None, export_dir: Path = EXPORT_DIR):
        self.ui = ConsoleUI(console, stream)
        self.alert_system = AlertSystem()
        self.alert_system.add_observer(ConsoleAlertObserver(self.ui.console))
        self.inventory = InventoryManager(db_url, alert_system=self.alert_system)
        self.receipt = Receipt()
        self.export_dir = export_dir

    def show_main_menu(self) -> int:
        """Display the login menu and return the chosen number"""
        self.ui.print_header("🛒 SUPERMARKET LOGIN MENU")

        table = Table(show_header=False, box=box.ROUNDED)
        table.add_column("Option", style="cyan", width=4)
        table.add_column("Role", style="white")
        for number, role in ROLE_CHOICES.items():
            table.add_row(str(number), role.value)
        table.add_row(str(EXIT_CHOICE), "Exit")
        self.ui.console.print(table)

        return self.ui.get_int("Enter choice")

    def handle_role_selection(self, choice: int):
        role = ROLE_CHOICES.get(choice)
        if role is None:
            self.ui.print_error("Invalid choice.")
            self.ui.wait_for_key()
            return

        logger.info("Starting %s session", role.value)
        RoleMenu(role, self.inventory, self.receipt, self.ui, self.export_dir).show()

    def run(self):
        """Main application loop"""
        try:
            while True:
                try:
                    self.ui.clear_screen()
                    choice = self.show_main_menu()

                    if choice == EXIT_CHOICE:
                        self.ui.print_info("Goodbye!")
                        break

                    self.handle_role_selection(choice)

                except (KeyboardInterrupt, EOFError):
                    self._say_goodbye()
                    break
                except Exception as e:
                    logger.exception("Unhandled error in menu loop")
                    self.ui.print_error(f"An error occurred: {e}")
                    try:
                        self.ui.wait_for_key()
                    except (KeyboardInterrupt, EOFError):
                        self._say_goodbye()
                        break
        finally:
            self.inventory.close()

    def _say_goodbye(self):
        self.ui.console.print()
        self.ui.print_info("Goodbye!")


def main():
    """Main entry point"""
    configure_logging()
    app = SupermarketApp()
    app.run()


if __name__ == "__main__":
    main()
