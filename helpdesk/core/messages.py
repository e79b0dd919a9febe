"""User-facing message catalogue shared by services, routers and the error model."""


class AuthMessages:
    REGISTRATION_SUCCESS = "User registered successfully"
    LOGIN_SUCCESS = "Logged in successfully"
    INVALID_CREDENTIALS = "Invalid email or password"
    USER_NOT_FOUND = "User not found"
    EMAIL_ALREADY_EXISTS = "Email already exists. Please use another email."
    INVALID_EMAIL = "Please provide a valid email address"
    PASSWORD_TOO_SHORT = "Password must be at least 8 characters long"
    NAME_REQUIRED = "Please provide your name"
    EMAIL_REQUIRED = "Please provide your email"
    PASSWORD_REQUIRED = "Please provide a password"


class TicketMessages:
    TICKET_CREATED = "Ticket created successfully"
    TICKET_UPDATED = "Ticket updated successfully"
    TICKET_DELETED = "Ticket deleted successfully"
    TICKET_NOT_FOUND = "Ticket not found"
    TITLE_REQUIRED = "Please provide a ticket title"
    DESCRIPTION_REQUIRED = "Please provide a ticket description"
    INVALID_PRIORITY = "Invalid priority level"
    INVALID_STATUS = "Invalid ticket status"
    DUE_DATE_REQUIRED = "Please provide a due date"
    AUTHOR_REQUIRED = "Ticket author is required"
    INVALID_SORT = "Invalid sort field"
    INVALID_DUE_DATE = "Due date is out of range"
    INVALID_FILTER = "Invalid filter"
    PAGE_OUT_OF_RANGE = "Page out of range"


class ErrorMessages:
    INTERNAL_SERVER_ERROR = "Something went wrong, please try again later"
    INVALID_INPUT = "Invalid input data."
    ROUTE_NOT_FOUND = "Route not found"
    DUPLICATE_KEY = "Duplicate field value. Please use another value!"
    INVALID_TOKEN = "Invalid token. Please log in again!"
    EXPIRED_TOKEN = "Your token has expired! Please log in again."
    UNAUTHORIZED = "Unauthorized access"
