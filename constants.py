# Global Constants

class Roles:
    ADMIN = "admin"
    EMPLOYEE = "employee"


class TaskStatus:
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"


class NotificationTypes:
    TASK_ASSIGNED = "TASK_ASSIGNED"
    TASK_DEADLINE = "TASK_DEADLINE"
    TASK_UPDATED = "TASK_UPDATED"
    TASK_COMPLETED = "TASK_COMPLETED"


# Assigner label used when a user files a task for themselves
SELF_ASSIGNER = "Self"
