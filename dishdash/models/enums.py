from enum import Enum


class UserRole(str, Enum):
    admin = "admin"
    user = "user"


class TodoStatus(str, Enum):
    todo = "todo"
    eaten = "eaten"


class PriceBand(str, Enum):
    one = "$"
    two = "$$"
    three = "$$$"
    four = "$$$$"
