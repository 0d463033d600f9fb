CATEGORIES = ('Startup', 'Storage', 'Hardware', 'Power', 'Security', 'Updates', 'Other')

# Default maintenance checklist, in display order.
DEFAULT_TASKS = (
    {
        'id': 'startup_apps',
        'title': 'Review startup applications',
        'category': 'Startup',
        'help': 'Disable non-essential apps that auto-launch.',
        'link': 'https://support.microsoft.com/en-us/windows/change-which-apps-run-automatically-at-startup-in-windows-11-1882a1f1-9d5a-3eea-8e04-700e3a8f9425',
    },
    {
        'id': 'clear_cache',
        'title': 'Clear cache & temporary files',
        'category': 'Storage',
        'help': 'Use Disk Cleanup or Storage Management.',
    },
    {
        'id': 'local_storage',
        'title': 'Audit local storage (.csv exports, media)',
        'category': 'Storage',
        'help': 'Archive or delete large, old files.',
    },
    {
        'id': 'camera_test',
        'title': 'Test camera & mic performance',
        'category': 'Hardware',
        'help': 'Check focus, colour, lag in your meeting app.',
    },
    {
        'id': 'user_habits',
        'title': 'Confirm weekly full shutdown habit',
        'category': 'Other',
        'help': 'Power off at least once/week for updates.',
    },
    {
        'id': 'battery_report',
        'title': 'Generate & review battery report (uptime, cycles)',
        'category': 'Power',
        'help': 'Windows: powercfg /batteryreport | macOS: System Information > Power.',
    },
    {
        'id': 'installed_apps',
        'title': 'Audit installed apps (AV/bloatware)',
        'category': 'Security',
        'help': 'Remove unused apps; check antivirus & firewall.',
    },
    {
        'id': 'hibp',
        'title': 'Run Have I Been Pwned check',
        'category': 'Security',
        'help': 'Check work/personal emails for breaches.',
        'link': 'https://haveibeenpwned.com/',
    },
    {
        'id': 'os_updates',
        'title': 'Install OS updates & reboot',
        'category': 'Updates',
    },
    {
        'id': 'driver_fw',
        'title': 'Update drivers/firmware (graphics, BIOS)',
        'category': 'Updates',
    },
    {
        'id': 'app_updates',
        'title': 'Update key applications',
        'category': 'Updates',
    },
)
