from forkvm.db.Account import ForkAccount
