from rich.markup import escape


def display_error(console, message):
    """Display error message"""
    console.print(f"[error]ERROR: {escape(str(message))}[/error]", highlight=False)


def display_warning(console, message):
    """Display warning message"""
    console.print(f"[warning]WARNING: {escape(str(message))}[/warning]", highlight=False)


def display_success(console, message):
    """Display success message"""
    console.print(f"[success]{escape(str(message))}[/success]", highlight=False)
