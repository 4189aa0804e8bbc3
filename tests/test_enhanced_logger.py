import threading
import unittest

from peq.enhanced_logger import EnhancedLogger, logger


class TestEnhancedLogger(unittest.TestCase):
    """Test cases for context-prefixed logging"""

    def tearDown(self):
        logger.clear_export_context()

    def test_prefix_contains_export_context(self):
        logger.set_export_context('orders', 'id', 8)
        prefix = logger._build_context_prefix()
        self.assertIn('[TABLE:orders]', prefix)
        self.assertIn('[SPLIT:id]', prefix)
        self.assertIn('[PARALLELISM:8]', prefix)
        self.assertIn('MEM:', prefix)

    def test_prefix_without_context(self):
        logger.clear_export_context()
        self.assertNotIn('TABLE:', logger._build_context_prefix())

    def test_messages_are_prefixed(self):
        with self.assertLogs('PEQ', level='INFO') as captured:
            logger.export_started('orders', 'id', 4)
            logger.queries_built(4)
        self.assertEqual(len(captured.output), 2)
        self.assertIn('[TABLE:orders]', captured.output[1])
        self.assertIn('[QUERIES:4]', captured.output[1])
        self.assertIn('Built 4 export queries', captured.output[1])

    def test_context_is_thread_local(self):
        logger.set_export_context('main_table')
        seen = {}

        def worker():
            seen['context'] = logger.get_export_context()

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join()

        self.assertIsNone(seen['context'])
        self.assertEqual(logger.get_export_context().table_name, 'main_table')

    def test_build_stats(self):
        test_logger = EnhancedLogger('PEQ-test')
        test_logger.queries_built(3)
        test_logger.build_failed(ValueError('bad'))
        self.assertEqual(test_logger.get_build_stats(), {'built': 1, 'failed': 1})


if __name__ == '__main__':
    unittest.main()
