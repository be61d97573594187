# ABOUTME: Commands listing what the current user can assume
# ABOUTME: Tab-separated output so results can be piped into "kion each"

"""Roles, accounts and access commands."""

from cleo.helpers import option

from kion_cli.cli.commands.base import KionCommand
from kion_cli.config import Settings
from kion_cli.session import SessionSelector


class RolesCommand(KionCommand):
    name = "roles"
    description = "Print accounts and Cloud Access Roles for the current user"

    def handle_command(self, settings: Settings) -> int:
        for role in SessionSelector(settings).client().get_cloud_access_roles():
            self.line(f"{role.account_number}\t{role.name}")
        return 0


class AccountsCommand(KionCommand):
    name = "accounts"
    description = "Print account numbers and names"

    def handle_command(self, settings: Settings) -> int:
        for account in SessionSelector(settings).client().get_accounts():
            self.line(f"{account.account_number}\t{account.name}")
        return 0


class AccessCommand(KionCommand):
    name = "access"
    description = "Print roles and associated accounts"

    options = [
        option("account", description="Filter by account name", flag=False),
        option("account-id", description="Filter by account ID", flag=False),
        option("cloud-access-role", "r", description="Filter by cloud access role", flag=False),
    ]

    def handle_command(self, settings: Settings) -> int:
        account = self.option("account")
        account_id = self.option("account-id")
        cloud_access_role = self.option("cloud-access-role")

        client = SessionSelector(settings).client()
        account_names = {a.id: a.name for a in client.get_accounts()}

        for role in client.get_cloud_access_roles():
            account_name = account_names.get(role.account_id, "")
            if account and account != account_name:
                continue
            if account_id and account_id != role.account_number:
                continue
            if cloud_access_role and cloud_access_role != role.name:
                continue

            self.line(f"{role.name}\t{role.account_number}\t{account_name}")
        return 0
