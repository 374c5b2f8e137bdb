"""Windows host adapters — PowerShell, tasklist, sc.exe."""
