from datetime import timedelta

from helmsman import *


def deploy(context):
    target = context.arg(0)
    if context.bool("dry-run"):
        context.info("would deploy %s to %s (timeout %s)", target, context.string("env"), context.duration("timeout"))
        return
    context.success("deployed %s to %s", target, context.string("env"))


def list_users(context):
    for role in context.strings("role") or ["all"]:
        context.print("users with role %s" % role)


app = App("shipyard", "Ship services to their environments", version="0.1.0")
app.global_flags(Bool("verbose", "v", help="verbose output"))
app.use(Recover())
app.command("deploy", "Deploy a service") \
    .with_args("service") \
    .with_flags(
        String("env", "e", help="target environment", env="SHIPYARD_ENV", default="staging", enum=("staging", "prod")),
        Bool("dry-run", "n", help="print what would happen"),
        Duration("timeout", help="give up after", default=timedelta(seconds=30)),
    ) \
    .alias("ship") \
    .use(Logger()) \
    .run(deploy)
app.group("users", "Manage users") \
    .command("list", "List users") \
    .with_flags(Strings("role", "r", help="filter by role")) \
    .alias("ls") \
    .run(list_users)
app.add_completion_command()


if __name__ == '__main__':
    app.main()
