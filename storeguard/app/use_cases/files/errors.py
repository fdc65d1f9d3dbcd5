from storeguard.libs.result import Error

FORBIDDEN = Error("FORBIDDEN", "Only customers can access order files")
ORDER_NOT_FOUND = Error("ORDER_NOT_FOUND", "Order not found or not eligible for file access")
FILE_NOT_FOUND = Error("FILE_NOT_FOUND", "File not found")
FILE_NOT_IN_ORDER = Error("FILE_NOT_IN_ORDER", "This file is not available for this order")
SIGNING_FAILED = Error("SIGNING_FAILED", "Failed to generate download link")
