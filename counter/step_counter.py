"""
Step counter state: the daily total shown on the display.
"""


class StepCounter:
    """
    Daily step total. Only ever increases during a day; reset at midnight.
    """

    def __init__(self):
        """Initialize counter with no steps."""
        self.steps = 0
        self.previous_day_steps = 0
        self.last_step_time = 0

    def add_steps(self, count, timestamp=None):
        """
        Add accepted steps to the total.

        Args:
            count: Number of newly accepted steps (negative values are ignored)
            timestamp: Optional time of the detection pass

        Returns:
            int: New total
        """
        if count > 0:
            self.steps += count
            if timestamp is not None:
                self.last_step_time = timestamp
        return self.steps

    def reset(self):
        """Start a new day, keeping the finished day's total."""
        self.previous_day_steps = self.steps
        self.steps = 0
        self.last_step_time = 0

    def get_steps(self):
        """Get current step total."""
        return self.steps

    def get_state_dict(self):
        """
        Get counter state as a dictionary.

        Returns:
            dict: Step totals for broadcasting and recording
        """
        return {
            'steps': self.steps,
            'previous_day_steps': self.previous_day_steps,
            'last_step_time': self.last_step_time
        }
