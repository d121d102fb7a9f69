"""
Cart Error Messages

User-facing messages sent to the notifier, plus the single exception type
raised across the inventory boundary.
"""

# Stock errors
ERROR_OUT_OF_STOCK = "Requested quantity is out of stock"

# Operation errors
ERROR_ADD_PRODUCT = "Failed to add product"
ERROR_REMOVE_PRODUCT = "Failed to remove product"
ERROR_UPDATE_PRODUCT_AMOUNT = "Failed to update product amount"


class InventoryError(Exception):
    """Product or stock record could not be resolved."""

    def __init__(self, message: str, product_id: int | None = None, not_found: bool = False):
        super().__init__(message)
        self.product_id = product_id
        self.not_found = not_found
