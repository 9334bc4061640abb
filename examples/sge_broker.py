#!/usr/bin/env python3

""" This example shows how to broker jobs to a local SGE cluster: requests
    pass admission control, are submitted with 'qsub' and are tracked until
    they complete (or overrun their time budget).

    Run it on an SGE submit host, from the repository root.
"""

__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"

import sys
import asyncio

import radical.gridgate as rgg


# ------------------------------------------------------------------------------
#
async def main():

    async with rgg.Broker(config_path='examples/gridgate.json') as broker:

        info = broker.session_manager.get_drms_info()
        print('Grid engine : %s' % info)

        for path in ['examples/job_single.json', 'examples/job_array.json']:

            request = {'ip'     : '127.0.0.1',
                       'time'   : rgg.utils.now_ms(),
                       'jobPath': path}
            try:
                descr = await broker.handle_request(request)

            except rgg.DenialError as de:
                print('Rejected    : %s' % de.as_dict())
                continue

            print('Job ID      : %s' % descr.job_id)
            print('Job Type    : %s' % descr.job_type)
            print('Job State   : %s' % descr.job_status)

            print('\n...waiting for job...\n')
            final = await broker.wait_for_result(descr.job_id)

            print('Job State   : %s' % final.job_status)
            print('Sub State   : %s' % final.sub_status)
            print('Exec. time  : %s ms' % final.total_execution_time)


if __name__ == "__main__":

    try:
        asyncio.run(main())

    except rgg.GridGateException as ex:
        print("An exception occured: %s " % ex)
        # get the whole traceback in case of an exception -
        # this can be helpful for debugging the problem
        print(" *** %s" % ex.traceback)
        sys.exit(-1)


# ------------------------------------------------------------------------------

